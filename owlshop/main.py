"""
Process entry point: python -m owlshop
"""

import argparse
import logging
import sys

from owlshop.config import load_config, parse_duration
from owlshop.errors import OwlShopError
from owlshop.shop import Shop

logger = logging.getLogger("owlshop")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate traffic on the owl shop")
    parser.add_argument("--request-rate", type=int, default=None,
                        help="page impressions per interval (overrides SHOP_REQUEST_RATE)")
    parser.add_argument("--request-rate-interval", type=parse_duration, default=None,
                        help="interval such as 1s or 500ms (overrides SHOP_REQUEST_RATE_INTERVAL)")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    try:
        cfg = load_config(
            request_rate=args.request_rate,
            request_rate_interval=args.request_rate_interval,
        )
    except OwlShopError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", e)
        sys.exit(1)

    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger.info("Starting owlshop, brokers=%s", cfg.kafka.brokers)
    try:
        shop = Shop.from_config(cfg)
    except OwlShopError as e:
        logger.error("Failed to start shop: %s", e)
        sys.exit(1)

    shop.start()


if __name__ == "__main__":
    main()
