MODULUS = 2147483647  # 2^31 - 1
MULTIPLIER = 16807


def _fold_seed(seed: str) -> int:
    """
    Rolling hash (h * 31 + code) over UTF-16 code units, wrapped to a
    signed 32-bit int. Characters outside the BMP fold as two surrogates.
    """
    data = seed.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        h = (h * 31 + int.from_bytes(data[i:i + 2], "little")) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class SeededRandom:
    """
    Deterministic Park-Miller generator keyed by a string seed.
    Each call returns the next float in [0, 1).
    """

    def __init__(self, seed=""):
        self.seed = str(seed)
        state = abs(_fold_seed(self.seed)) % MODULUS
        self._state = state or MODULUS - 1

    def __call__(self) -> float:
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def uniform(self, low: float, high: float) -> float:
        return low + self() * (high - low)

    def spread(self, width: float) -> float:
        """Centred noise in [-width/2, width/2)."""
        return (self() - 0.5) * width


def make_generator(seed="") -> SeededRandom:
    return SeededRandom(seed)
