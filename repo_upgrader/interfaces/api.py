"""
High-level API for keeping one installed package up to date.

``PackageUpgrader`` wires a local package to its remote provider, answers
update checks against a host update store and manages the access token used
for private repositories.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Tuple, Union

from ..core.decision import apply_update
from ..core.filter import HookRegistry
from ..core.local import LocalDescriptor
from ..infrastructure.http_cache import HttpCache
from ..infrastructure.logger import logger
from ..models import PackageKind, ResolvedMetadata, UpgraderConfig
from ..services.base import ProviderAdapter, build_http_cache
from ..services.markup import Renderer
from ..services.registry import create_adapter


API_TOKEN_SECTION = '<div class="package-upgrader-api-token"></div>'


def mask_token(token: str) -> str:
    """Keep the first and last three characters of a token visible."""

    return "".join(
        char if index < 3 or index >= len(token) - 3 else ("*" if index < 36 else "")
        for index, char in enumerate(token)
    )


class PackageUpgrader:
    """
    Update integration for a single plugin or theme.

    Provides methods to check for a newer release, look up the package
    information shown to users, and store the access token of private
    repositories.
    """

    def __init__(
        self,
        kind: Union[PackageKind, str],
        filename: Union[str, Path],
        *,
        root: Optional[Union[str, Path]] = None,
        hooks: Optional[HookRegistry] = None,
        http: Optional[HttpCache] = None,
        config: Optional[UpgraderConfig] = None,
        token_store: Optional[MutableMapping[str, str]] = None,
        renderer: Optional[Renderer] = None,
        verbose: Optional[bool] = None,
    ):
        """
        Initialize the upgrader and resolve the package's provider.

        Args:
            kind: Plugin or theme
            filename: Entry file carrying the header comment
            root: Directory holding all packages of this kind
            hooks: Filter registry shared with third-party code
            http: Cached HTTP access, built from ``config`` when omitted
            config: Engine configuration
            token_store: Credential storage, in-memory when omitted
            renderer: Markdown to HTML renderer for release notes
            verbose: Enable debug logging (defaults to ``config.verbose``)
        """
        self.kind = PackageKind.coerce(kind)
        self.filename = Path(filename)
        self.root = root
        self.config = config or UpgraderConfig()
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.http = http if http is not None else build_http_cache(self.config)
        self.token_store: MutableMapping[str, str] = token_store if token_store is not None else {}
        self.renderer = renderer

        self.verbose = self.config.verbose if verbose is None else verbose
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

        self.local: Optional[LocalDescriptor] = None
        self.remote: Optional[ProviderAdapter] = None
        self._registered: List[Tuple[str, Any, int]] = []

        self.bootstrap()

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # -- Wiring -------------------------------------------------------------

    def bootstrap(self) -> bool:
        """Read the local package and attach its provider adapter."""

        self.local = LocalDescriptor.from_file(self.kind, self.filename, self.root)
        if not self.local.has_remote:
            logger.warning("No repository found.")
            return False

        self._connect()
        return self.remote is not None

    def _connect(self) -> None:
        if self.remote is not None:
            self.remote.close()

        options: Dict[str, Any] = {"hooks": self.hooks, "http": self.http, "config": self.config}
        if self.renderer is not None:
            options["renderer"] = self.renderer
        self.remote = create_adapter(self.kind, self.local, **options)

        self._unregister_filters()
        if self.remote is not None:
            self._register_filters(self.remote)

    def _register_filters(self, remote: ProviderAdapter) -> None:
        pipeline = remote.filters
        registrations = [
            (pipeline.hook_name(pipeline.repo_type, pipeline.repo_id, "access_token"), self.api_token, -99),
            (pipeline.hook_name(pipeline.repo_type, pipeline.repo_id, "package_information"),
             self.package_information_filter, 999),
        ]
        for name, callback, priority in registrations:
            self.hooks.add_filter(name, callback, priority)
        self._registered = registrations

    def _unregister_filters(self) -> None:
        for name, callback, priority in self._registered:
            self.hooks.remove_filter(name, callback, priority)
        self._registered = []

    def close(self) -> None:
        self._unregister_filters()
        if self.remote is not None:
            self.remote.close()

    # -- Filters ------------------------------------------------------------

    @property
    def api_token_key(self) -> str:
        folder = self.local.folder if self.local else self.filename.parent.name
        return f"{self.config.hook_prefix}_{self.kind.key}_{folder}_api_token"

    def api_token(self, value: Any, *args: Any) -> Any:
        """``access_token`` filter returning the stored token, if any."""

        saved = self.token_store.get(self.api_token_key)
        return saved if saved else value

    def package_information_filter(
        self, valid: Any, metadata: ResolvedMetadata, with_sections: bool, *args: Any
    ) -> Any:
        """Offer a token field on private packages."""

        if with_sections and "private" in (self.local.remote_visibility, metadata.remote_visibility):
            metadata.sections["api_token"] = API_TOKEN_SECTION
        return valid

    # -- Update checks ------------------------------------------------------

    @property
    def update_key(self) -> str:
        return self.local.id if self.kind is PackageKind.PLUGIN else self.local.folder

    def check_update(self, transient: MutableMapping[str, Any], force: bool = False) -> MutableMapping[str, Any]:
        """
        Record or clear this package's entry in a host update store.

        Args:
            transient: Update store with "checked" and "response" mappings
            force: Bypass cached remote responses

        Returns:
            The same update store
        """
        if self.remote is None or not transient.get("checked"):
            return transient

        refreshed = LocalDescriptor.from_file(self.kind, self.filename, self.root)
        if refreshed != self.local:
            self.local = refreshed
            self._connect()
            if self.remote is None:
                return transient

        resolved = self.remote.set_props(False, force)
        apply_update(
            transient,
            self.update_key,
            self.local.version,
            self.remote.metadata if resolved else None,
        )
        return transient

    def package_information(self, slug: str) -> Optional[ResolvedMetadata]:
        """
        Information about this package, if ``slug`` designates it.

        Plugins are resolved with their readme, changelog and contributors.
        A private package that cannot be resolved yields a stub whose only
        section asks for an access token.
        """
        if self.remote is None or slug != self.local.folder:
            return None

        if self.remote.set_props(self.kind is PackageKind.PLUGIN):
            return self.remote.metadata

        if self.local.is_private:
            return ResolvedMetadata(
                kind=self.kind,
                id=self.local.id,
                slug=self.local.slug,
                folder=self.local.folder,
                file=self.local.file,
                name=self.local.name,
                version=self.local.version,
                remote_visibility=self.local.remote_visibility,
                sections={"api_token": API_TOKEN_SECTION},
            )

        return None

    # -- Credentials --------------------------------------------------------

    def masked_api_token(self) -> str:
        return mask_token(self.token_store.get(self.api_token_key, ""))

    def save_api_token(self, api_token: str) -> Tuple[bool, str]:
        """Store ``api_token`` if the provider accepts it."""

        api_token = (api_token or "").strip()
        if not api_token:
            return False, "API Token is missing."

        key = self.api_token_key
        previous = self.token_store.get(key)
        if api_token == previous:
            return True, "API Token is the same."

        self.token_store[key] = api_token
        if self.remote is None or not self.remote.validate_api_token():
            if previous:
                self.token_store[key] = previous
            else:
                self.token_store.pop(key, None)
            return False, "API Token is invalid. Verify the API Token and try again."

        logger.info(f"API token saved for {self.local.folder}")
        return True, "API Token successfully saved."

    def remove_api_token(self) -> Tuple[bool, str]:
        if self.token_store.pop(self.api_token_key, None) is None:
            return False, "There was an error. API Token was not removed."
        return True, "API Token successfully removed."


__all__ = [
    "API_TOKEN_SECTION",
    "mask_token",
    "PackageUpgrader",
]
