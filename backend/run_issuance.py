import asyncio
import logging
import os
import sys

import dotenv

from issuance.adapters.adapter_coingecko import CoinGeckoPriceReader
from issuance.adapters.rpc_funcs.erc20_reader import Erc20BalanceReader
from issuance.issuance_config import adapter_info
from issuance.registry import IssuanceContext, setup

USE_DOTENV = os.getenv("USE_DOTENV", "false").lower() == "true"
if USE_DOTENV:
    dotenv.load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("issuance_trigger")


async def run_issuance(token_id: str = "swapr"):
    """Register the issuance adapter for a token and run all of its queries once."""
    logger.info(f"Starting {adapter_info['name']} v{adapter_info['version']} for {token_id}")

    context = IssuanceContext(balances=Erc20BalanceReader(), prices=CoinGeckoPriceReader())
    try:
        record = setup(context, token_id)
        results = await context.registry.execute_all(record.id)

        for query_name, value in results.items():
            if isinstance(value, Exception):
                logger.error(f"{record.id} {query_name} failed: {value}")
            else:
                logger.info(f"{record.id} {query_name}: {value}")
        return results
    finally:
        # Clean up resources
        await context.balances.close()
        await context.prices.close()
        await context.ipfs.close()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        asyncio.run(run_issuance(*argv[:1]))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
