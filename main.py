#!/usr/bin/env python3
"""Command line entry point for SUAVE confidential compute requests.

Builds, signs and encodes a request from environment configuration, or
decodes a wire request and prints its public record. Nothing is sent to a
node; the printed envelope can be submitted with eth_sendRawTransaction.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv


# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from suave_ccr.config import SuaveConfig
from suave_ccr.errors import SuaveError
from suave_ccr.request import ConfidentialComputeRequest
from suave_ccr.signer import SuaveSigner
from suave_ccr.utils.encoding import to_int_safe


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with encode and decode subcommands."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="SUAVE confidential compute request tool - encode and decode CCR transactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  KETTLE_ADDRESS  - Address of the kettle executing requests (required for encode)
  CHAIN_ID        - SUAVE chain ID (default: 0x1008c45)
  GAS_LIMIT       - Gas limit (default: 1000000)
  GAS_PRICE       - Gas price in wei (required for encode unless --gas-price is given)
  PRIVATE_KEYS    - Comma-separated signing keys, first one is the default
  LOG_LEVEL       - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Build, sign and encode a request")
    encode.add_argument("--to", default=None, help="Recipient address (default: zero address)")
    encode.add_argument("--data", default="0x", help="Public call input as hex")
    encode.add_argument("--value", default="0", help="Value in wei")
    encode.add_argument("--nonce", required=True, help="Sender nonce")
    encode.add_argument("--gas-price", default=None, help="Gas price in wei (overrides GAS_PRICE)")
    encode.add_argument(
        "--confidential-inputs",
        default="0x",
        help="Confidential inputs as hex"
    )
    encode.add_argument(
        "--signer",
        default=None,
        help="Address of the identity to sign with (default: first key)"
    )

    decode = subparsers.add_parser("decode", help="Decode a 0x43 request envelope")
    decode.add_argument("envelope", help="Encoded request as hex")

    return parser


async def encode_request(args: argparse.Namespace) -> None:
    """Build a request from configuration and arguments, sign it and print the envelope."""
    config: SuaveConfig = SuaveConfig.from_env()
    config.log_config()

    signer = SuaveSigner.from_config(config.signing)

    gas_price = to_int_safe(args.gas_price) if args.gas_price is not None else config.gas.gas_price
    tx = {
        "to": args.to,
        "data": args.data,
        "value": to_int_safe(args.value),
        "nonce": to_int_safe(args.nonce),
        "gas": config.gas.gas_limit,
        "gasPrice": gas_price,
        "chainId": config.chain.chain_id,
    }
    request = ConfidentialComputeRequest.from_tx_params(
        tx, config.chain.kettle_address, args.confidential_inputs
    )

    if missing := request.record.missing_fields(require_signature=False):
        raise ValueError(f"Cannot build request, missing: {', '.join(missing)}")

    await signer.sign_as(args.signer or signer.default_address, request)

    print(f"signer:   {request.from_address}")
    print(f"digest:   {request.digest().to_0x_hex()}")
    print(f"envelope: {request.encode().to_0x_hex()}")


def decode_request(args: argparse.Namespace) -> None:
    """Decode a request envelope and print its public record as JSON."""
    request = ConfidentialComputeRequest.decode(args.envelope)
    output = request.record.to_json_dict()
    output["from"] = request.recover_signer()
    output["confidentialInputs"] = request.confidential_inputs.to_0x_hex()
    output["confidentialInputsVerified"] = request.verify_confidential_inputs()
    print(json.dumps(output, indent=2))


async def main() -> None:
    """Main entry point for the CCR command line tool.

    Raises:
        SystemExit: On configuration, encoding or decoding errors
    """
    load_dotenv()

    args: argparse.Namespace = build_parser().parse_args()

    # Set up logging with specified level
    setup_logging(args.log_level)

    try:
        match args.command:
            case "encode":
                await encode_request(args)
            case "decode":
                decode_request(args)

    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - KETTLE_ADDRESS: Address of the kettle executing requests")
        logger.error("  - CHAIN_ID: SUAVE chain ID (default: 0x1008c45)")
        logger.error("  - GAS_PRICE: Gas price in wei")
        logger.error("  - PRIVATE_KEYS: Comma-separated signing keys")
        sys.exit(1)

    except SuaveError as e:
        logger.error(f"Request Error: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    # Run the main async function
    asyncio.run(main())
