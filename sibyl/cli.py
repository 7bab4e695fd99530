import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from sibyl.configuration.configuration import load_oracle_config, SOLANA_DEVNET, SOLANA_MAINNET_BETA
from sibyl.configuration.logging_config import configure_logging
from sibyl.container.service_container import ServiceContainer
from sibyl.utilities.exceptions import WalletNotFoundException
from sibyl.utilities.setup_utilities.init_oracle import init_oracle
from sibyl.utilities.setup_utilities.oracle_status import oracle_status

ENVIRONMENT_HELP = """
Environment variables:
  SOLANA_RPC           Custom RPC endpoint
  SOLANA_PRIVATE_KEY   Wallet private key (base58 encoded)
  SOLANA_KEYPAIR_PATH  Wallet keypair file (default ~/.config/solana/id.json)
  DEEPSEEK_API_KEY     DeepSeek API key for AI predictions
  SIBYL_PROGRAM_ID     sibyl_oracle program id override
  SIBYL_LOG_LEVEL      Log level (default INFO)
"""

def _network_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    network = parent.add_mutually_exclusive_group()
    network.add_argument("--devnet", dest="network", action="store_const", const=SOLANA_DEVNET.name,
                         help="Use Solana devnet (default)")
    network.add_argument("--mainnet-beta", dest="network", action="store_const", const=SOLANA_MAINNET_BETA.name,
                         help="Use Solana mainnet-beta")
    parent.set_defaults(network=SOLANA_DEVNET.name)
    parent.add_argument("--log-level", default=None, help="Log level (overrides SIBYL_LOG_LEVEL)")
    return parent

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sibyl",
        description="Sibyl Oracle: AI-powered prediction oracle for Solana",
        epilog=ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    parent = _network_parent()

    run_parser = subparsers.add_parser('run', parents=[parent], help='Generate, record and draft one prediction',
                                       epilog=ENVIRONMENT_HELP, formatter_class=argparse.RawDescriptionHelpFormatter)
    run_parser.add_argument("--strict", action="store_true",
                            help="Fail instead of recording locally when the ledger is unavailable")
    run_parser.add_argument("--log-dir", type=Path, default=None, help="Directory for the prediction log")
    run_parser.add_argument("--drafts-dir", type=Path, default=None, help="Directory for announcement drafts")

    subparsers.add_parser('init', parents=[parent], help='Initialize the oracle account')
    subparsers.add_parser('status', parents=[parent], help='Show the on-chain oracle state')
    return parser

async def _dispatch(command: str, container: ServiceContainer) -> int:
    try:
        if command == 'run':
            outcome = await container.orchestrator().run()
            return outcome.exit_code
        elif command == 'init':
            return await init_oracle(container.oracle_program, container.network_config.explorer_tx_url)
        elif command == 'status':
            return await oracle_status(container.oracle_program)
    finally:
        await container.close()
    raise ValueError(f"Unknown command: {command}")

def main(argv=None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.log_level)

    overrides = {}
    if args.command == 'run':
        overrides = dict(strict=args.strict, log_dir=args.log_dir, drafts_dir=args.drafts_dir)
    oracle_config = load_oracle_config(args.network, **overrides)
    print(f"Using Solana {oracle_config.network.name}")

    try:
        container = ServiceContainer.initialize(oracle_config)
    except WalletNotFoundException as e:
        logger.error(f"main: {e}")
        print(f"{e}")
        return 1

    return asyncio.run(_dispatch(args.command, container))
