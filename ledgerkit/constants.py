"""LedgerKit constants."""

HEX_PREFIXES = ("0x", "0X")

HEIGHT_TAGS = {"latest", "earliest"}
DEFAULT_HEIGHT = "latest"

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
U256_MAX = 2**256 - 1

ADDRESS_BYTES = 20
H256_BYTES = 32

ALGORITHM_SECP256K1 = "secp256k1"
ALGORITHM_ED25519 = "ed25519"
ALGORITHM_SM2 = "sm2"
ALLOWED_ALGORITHMS = (ALGORITHM_SECP256K1, ALGORITHM_ED25519, ALGORITHM_SM2)

# Private key widths per signing scheme.
PRIVKEY_BYTES = {
    ALGORITHM_SECP256K1: 32,
    ALGORITHM_ED25519: 64,
    ALGORITHM_SM2: 32,
}

# SM2 recommended curve (GB/T 32918.5) group order.
SM2_ORDER = 0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFF7203DF6B21C6052B53BBF40939D54123

DEFAULT_URL = "http://127.0.0.1:1337"
DEFAULT_ALGORITHM = ALGORITHM_SECP256K1
DEFAULT_QUOTA = 1_000_000

ENV_URL = "LEDGERKIT_URL"
ENV_ALGORITHM = "LEDGERKIT_ALGORITHM"
ENV_SESSION = "LEDGERKIT_SESSION"
ENV_RUNNER = "LEDGERKIT_RUNNER"
ENV_PRIVATE_KEY = "LEDGERKIT_PRIVATE_KEY"

RUNNER_NAME = "ledgerkit-rpc"
