"""Dependency injection container for the application."""
from dependency_injector import containers, providers

from getends import config as env
from getends.domain.extraction_set import ExtractionSet
from getends.services.dns_resolver import DEFAULT_HOSTS_PATH, DnsResolverConfig, PublicDnsResolver
from getends.services.extraction_executor import ExtractionExecutor
from getends.services.http_service import HttpService
from getends.services.http_session import build_session
from getends.services.link_extractor import LinkExtractor
from getends.services.link_processor import LinkProcessor
from getends.services.link_scoper import LinkScoper
from getends.services.result_writer import ResultFileWriter
from getends.services.run_profile_loader import RunProfileLoader


# Environment variables used by the container (read via `getends.config` helpers).
#
# GETENDS_USER_AGENT (str, default: desktop Chrome UA)
#   User-Agent header sent with every target request.
#
# GETENDS_ACCEPT (str, default: HTML-preferring Accept value)
#   Accept header value. Omitted entirely when the run disables it (--no-accept).
#
# GETENDS_CONNECT_TIMEOUT (float seconds, default: 15)
# GETENDS_REQUEST_TIMEOUT (float seconds, default: 30)
#   Connect timeout and overall budget for a single target fetch.
#
# GETENDS_KEEPALIVE_SECONDS (int seconds, default: 15)
#   TCP keep-alive idle/interval for outbound connections.
#
# GETENDS_DNS_PRIMARY (str, default: "1.1.1.1")
# GETENDS_DNS_FALLBACK (str, default: "8.8.8.8")
# GETENDS_DNS_PORT (int, default: 53)
# GETENDS_DNS_TIMEOUT (float seconds, default: 10)
#   Nameservers queried for every new connection; the fallback is only used
#   when the primary cannot be reached.
#
# GETENDS_HOSTS_FILE (str, default: /etc/hosts)
#   hosts(5) file consulted before the nameservers.
#
# SEND_ACCEPT, JS_ONLY and WORKERS are run options, set by the CLI per run.
ENV = {
    "USER_AGENT": env.get_str_env("GETENDS_USER_AGENT", env.DEFAULT_USER_AGENT),
    "ACCEPT": env.get_str_env("GETENDS_ACCEPT", env.DEFAULT_ACCEPT),
    "SEND_ACCEPT": True,
    "CONNECT_TIMEOUT": env.get_float_env("GETENDS_CONNECT_TIMEOUT", 15.0),
    "REQUEST_TIMEOUT": env.get_float_env("GETENDS_REQUEST_TIMEOUT", 30.0),
    "KEEPALIVE_SECONDS": env.get_int_env("GETENDS_KEEPALIVE_SECONDS", 15),
    "DNS_PRIMARY": env.get_str_env("GETENDS_DNS_PRIMARY", "1.1.1.1"),
    "DNS_FALLBACK": env.get_optional_str_env("GETENDS_DNS_FALLBACK") or "8.8.8.8",
    "DNS_PORT": env.get_int_env("GETENDS_DNS_PORT", 53),
    "DNS_TIMEOUT": env.get_float_env("GETENDS_DNS_TIMEOUT", 10.0),
    "HOSTS_FILE": env.get_str_env("GETENDS_HOSTS_FILE", DEFAULT_HOSTS_PATH),
    "JS_ONLY": False,
    "WORKERS": 1,
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for getends."""

    config = providers.Configuration(default=ENV)

    # DNS settings are built once and handed to the session factory
    dns_resolver_config = providers.Singleton(
        DnsResolverConfig,
        primary=config.DNS_PRIMARY,
        fallback=config.DNS_FALLBACK,
        port=config.DNS_PORT,
        timeout=config.DNS_TIMEOUT,
        hosts_path=config.HOSTS_FILE,
    )

    dns_resolver = providers.Singleton(
        PublicDnsResolver,
        config=dns_resolver_config,
    )

    # One session per run so connection pools are shared across targets
    http_session = providers.Singleton(
        build_session,
        resolver=dns_resolver,
        keepalive_seconds=config.KEEPALIVE_SECONDS,
        verify_tls=False,
    )

    http_service = providers.Factory(
        HttpService,
        user_agent=config.USER_AGENT,
        http_client=http_session.provided.get,
        accept=config.ACCEPT,
        send_accept=config.SEND_ACCEPT,
        connect_timeout=config.CONNECT_TIMEOUT,
        request_timeout=config.REQUEST_TIMEOUT,
        verify_tls=False,
    )

    link_extractor = providers.Factory(LinkExtractor)

    link_scoper = providers.Factory(
        LinkScoper,
        js_only=config.JS_ONLY,
    )

    link_processor = providers.Factory(
        LinkProcessor,
        extractor=link_extractor,
        scoper=link_scoper,
    )

    extraction_executor = providers.Factory(
        ExtractionExecutor,
        fetcher=http_service,
        link_processor=link_processor,
        workers=config.WORKERS,
    )

    extraction_set = providers.Factory(ExtractionSet)

    run_profile_loader = providers.Factory(RunProfileLoader)

    result_writer = providers.Factory(ResultFileWriter)
