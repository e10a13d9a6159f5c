"""Credential and site configuration for the Datadog API."""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SITE = "datadoghq.com"
SECURE_PREFIX = "https://"


def clean_site(site: str) -> str:
    """Strip a single leading https:// so the site can be used as a bare domain."""
    if site.startswith(SECURE_PREFIX):
        return site[len(SECURE_PREFIX):]
    return site


@dataclass(frozen=True)
class DatadogConfig:
    """Resolved Datadog credentials and regional sites."""
    api_key: str
    app_key: str
    site: str = DEFAULT_SITE
    logs_site: Optional[str] = None
    metrics_site: Optional[str] = None

    def __post_init__(self):
        # frozen dataclass, so normalize through object.__setattr__
        site = clean_site(self.site or DEFAULT_SITE)
        object.__setattr__(self, "site", site)
        object.__setattr__(self, "logs_site", clean_site(self.logs_site or site))
        object.__setattr__(self, "metrics_site", clean_site(self.metrics_site or site))

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.app_key)

    def site_for(self, domain: str) -> str:
        """Return the site serving an API domain (logs and metrics may be regional)."""
        if domain == "logs":
            return self.logs_site
        if domain == "metrics":
            return self.metrics_site
        return self.site

    @classmethod
    def resolve(
        cls,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DatadogConfig":
        """Resolve configuration from command-line overrides, then the environment.

        Args:
            overrides: Values from command-line flags keyed by flag name
                (apiKey, appKey, site, logsSite, metricsSite)
            environ: Environment mapping (defaults to os.environ, which
                already holds anything loaded from .env)

        Raises:
            ConfigurationError: If the API key or application key is missing
        """
        overrides = overrides or {}
        environ = os.environ if environ is None else environ

        def pick(flag: str, env_var: str) -> Optional[str]:
            return overrides.get(flag) or environ.get(env_var) or None

        api_key = pick("apiKey", "DD_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "DD_API_KEY is required.\n"
                "Please provide it via command line argument or .env file.\n"
                " Command line: --apiKey=your_api_key"
            )

        app_key = pick("appKey", "DD_APP_KEY")
        if not app_key:
            raise ConfigurationError(
                "DD_APP_KEY is required.\n"
                "Please provide it via command line argument or .env file.\n"
                " Command line: --appKey=your_app_key"
            )

        site = pick("site", "DD_SITE") or DEFAULT_SITE
        config = cls(
            api_key=api_key,
            app_key=app_key,
            site=site,
            logs_site=pick("logsSite", "DD_LOGS_SITE"),
            metrics_site=pick("metricsSite", "DD_METRICS_SITE"),
        )
        logger.info(
            f"Datadog site: {config.site} (logs: {config.logs_site}, metrics: {config.metrics_site})"
        )
        return config
