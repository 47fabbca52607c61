"""Basic usage example for the Quorum transaction layer."""

import logging
import os

from dotenv import load_dotenv

from quorum_tx import ContractService, NetworkConfig, PrivacyFlag, QuorumTxError

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(level=logging.INFO)


def build_config() -> NetworkConfig:
    """Describe a two node network from environment variables."""

    return NetworkConfig.from_mapping(
        {
            "nodes": {
                "Node1": {
                    "url": os.getenv("NODE1_URL", "http://localhost:22000"),
                    "privacy_key": os.getenv("NODE1_PRIVACY_KEY"),
                },
                "Node2": {
                    "url": os.getenv("NODE2_URL", "http://localhost:22001"),
                    "privacy_key": os.getenv("NODE2_PRIVACY_KEY"),
                },
            },
            # Directory holding storea.bin, SimpleStorage.bin, ... from solc --bin
            "artifacts_dir": os.getenv("ARTIFACTS_DIR", "build/contracts"),
            "retry": {"max_attempts": 30, "sleep_duration_ms": 1000},
        }
    )


def main() -> None:
    service = ContractService(build_config())

    try:
        # Public SimpleStorage
        contract = service.create_simple_contract(42, "Node1", None).result()
        print(f"SimpleStorage deployed at {contract.address}")
        seen = service.read_simple_contract_value("Node2", contract.address)
        print(f"Value seen by Node2: {seen}")

        # Private SimpleStorage shared with Node2 only, using enhanced privacy
        private = service.create_simple_contract(
            7, "Node1", ["Node2"], flags=[PrivacyFlag.PARTY_PROTECTION]
        ).result()
        print(f"Private SimpleStorage deployed at {private.address}")

        # Generic store contracts dispatched by name
        storec = service.create_generic_store_contract("Node1", "storec", 1, None, False).result()
        storeb = service.create_generic_store_contract(
            "Node1", "storeb", 2, storec.address, False
        ).result()
        service.set_generic_store_value(
            "Node1", storeb.address, "storeb", "setc", 10, False
        ).result()
        value = service.read_generic_store_value("Node1", storec.address, "storec", "getc")
        print(f"storec.getc after storeb.setc(10): {value}")

        root = service.get_storage_root("Node1", storec.address).result()
        print(f"Storage root of storec: {root}")
    except QuorumTxError as exc:
        print(f"Operation failed: {exc} {exc.details}")


if __name__ == "__main__":
    main()
