MAX_COUNT = 2 ** 32          # most elements any single stream may emit in one run
MIN_CHUNK_LENGTH = 2
ENTROPY_BYTES = 64           # wide reduction input for tau and pedersen seeds

DEFAULT_COUNT = MAX_COUNT
DEFAULT_CHUNK_LENGTH = 65536

G1_PATTERN = "g1_{}.bin"
G2_PATTERN = "g2_{}.bin"
PAIRED_PATTERN = "g1g2_{}.bin"
PEDERSEN_G1_PATTERN = "pedersen_g1_{}.bin"
PEDERSEN_G2_PATTERN = "pedersen_g2_{}.bin"
PLACEHOLDER = "{}"

PEDERSEN_DST = b"PTAU-GEN-PEDERSEN-V01-CS01-with-BLS12381_XMD:SHA-256_SSWU_RO_"
PEDERSEN_BASE_SEED = b"ptau-gen pedersen base"

FLUSH_PARTIAL_CHUNK = True
REPORT_INTERVAL = 1.0        # seconds
WORKERS = "process"          # "process" or "thread"
