"""Pyth Network price oracle."""
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig

logger = logging.getLogger(__name__)


class PythOracle:
    """Fetch USD prices from Pyth Hermes, keyed by upper-case symbol."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = {k.upper(): v for k, v in config.feeds.items()}

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, float]:
        """Fetch current prices from Pyth Network.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        prices: dict[str, float] = {}

        feeds = self.price_feeds
        if symbols is not None:
            wanted = {s.upper() for s in symbols}
            feeds = {k: v for k, v in self.price_feeds.items() if k in wanted}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        params = [("ids[]", fid) for fid in feed_ids]
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(self.hermes_url, params=params) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices
                    data = await response.json()
        except aiohttp.ClientError as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return prices

        id_to_assets: dict[str, list[str]] = {}
        for asset, feed_id in feeds.items():
            id_to_assets.setdefault(feed_id.lower().removeprefix("0x"), []).append(asset)

        for item in data.get("parsed", []):
            feed_id = str(item.get("id", "")).lower().removeprefix("0x")
            price_data = item.get("price", {})
            try:
                price = int(price_data["price"]) * 10 ** int(price_data["expo"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed Pyth entry for feed %s", feed_id)
                continue
            for asset in id_to_assets.get(feed_id, []):
                prices[asset] = price

        logger.info("Fetched %d prices from Pyth Network", len(prices))
        for asset, price in sorted(prices.items()):
            logger.debug("  %s: $%.4f", asset, price)

        return prices
