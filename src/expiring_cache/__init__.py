"""Process-local expiring key-value cache."""

import json
import logging

import click
from dotenv import load_dotenv

from .cache import CacheEntry, CacheStats, ExpiringCache, LookupStatus
from .errors import InvalidKeyError, InvalidTTLError

__version__ = "0.1.0"

logger = logging.getLogger("expiring-cache")


def _parse_params(values: tuple[str, ...]) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        params[name.strip()] = value
    return params


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to .env file",
)
def main(verbose: int, env_file: str | None) -> None:
    """Inspect and exercise the expiring cache."""
    logging_level = logging.WARNING
    if verbose == 1:
        logging_level = logging.INFO
    elif verbose >= 2:
        logging_level = logging.DEBUG

    logging.basicConfig(
        level=logging_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if env_file:
        logger.debug("Loading environment from file: %s", env_file)
        load_dotenv(env_file)
    else:
        load_dotenv()


@main.command("config")
def config_command() -> None:
    """Print the effective cache configuration as JSON."""
    from .config import load_config

    click.echo(json.dumps(load_config().as_dict(), indent=2, sort_keys=True))


@main.command("fetch")
@click.argument("url")
@click.option("--param", "params", multiple=True, help="Query parameter as key=value (repeatable)")
@click.option("--ttl", type=float, default=None, help="TTL in seconds (defaults to CACHE_DEFAULT_TTL_SECONDS)")
@click.option("--repeat", type=click.IntRange(min=1), default=1, help="Number of fetches to issue")
@click.pass_context
def fetch_command(
    ctx: click.Context,
    url: str,
    params: tuple[str, ...],
    ttl: float | None,
    repeat: int,
) -> None:
    """Fetch URL as JSON through the cache and report hit/miss stats."""
    from .config import load_config
    from .errors import check_ttl, normalize_error
    from .fetcher import CachedFetcher

    query = _parse_params(params)
    config = load_config()
    fetcher: CachedFetcher | None = None
    data = None
    try:
        fetcher = CachedFetcher.from_config(config)
        if config.sweep_enabled:
            fetcher.cache.start()
        if ttl is not None:
            check_ttl(ttl)
        for _ in range(repeat):
            data = fetcher.get_json(url, query, ttl)
    except Exception as exc:
        click.echo(json.dumps(normalize_error("fetch", exc), ensure_ascii=False), err=True)
        ctx.exit(1)
    finally:
        if fetcher is not None:
            fetcher.cache.stop()
            fetcher.close()

    stats = fetcher.cache.stats()
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))
    click.echo(
        json.dumps(
            {
                "hits": stats.hits,
                "misses": stats.misses,
                "expirations": stats.expirations,
                "hit_ratio": round(stats.hit_ratio, 3),
                "size": fetcher.cache.size(),
            }
        )
    )


__all__ = [
    "__version__",
    "CacheEntry",
    "CacheStats",
    "ExpiringCache",
    "InvalidKeyError",
    "InvalidTTLError",
    "LookupStatus",
    "main",
]

if __name__ == "__main__":
    main()
