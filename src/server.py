"""Protean Engine runner for the storefront domain.

Starts Engine workers that process events asynchronously when the
production overlay switches event processing to ``async``:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes the event handlers
  (cart clearing, receipts, refund side effects, notification dispatch)

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine


def _get_domain():
    """Import, configure logging for, and initialize the storefront domain."""
    from storefront.domain import storefront
    from storefront.utils.logging import configure_logging

    configure_logging()
    storefront.init()
    return storefront


async def run():
    engine = Engine(_get_domain())
    await engine.run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
