"""BIP32/BIP44 derivation paths.

Parsing and hardened-index handling are delegated to bip_utils. Paths are
immutable values; derived keys do not keep them.
"""

from dataclasses import dataclass

from bip_utils import Bip32KeyIndex, Bip32Path, Bip32PathError, Bip32PathParser

from terrasign.errors import InvalidPath

HARDENED_OFFSET = Bip32KeyIndex.HardenIndex(0)
MAX_INDEX = HARDENED_OFFSET - 1

# Terra registered coin type (SLIP-44)
LUNA_COIN_TYPE = 330

_HARDENED_MARKS = ("'", "h", "H", "p")


def _key_index(index: int) -> Bip32KeyIndex:
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidPath(f"Index must be an integer, got {type(index).__name__}")
    try:
        return Bip32KeyIndex(index)
    except ValueError:
        raise InvalidPath(f"Raw index {index} does not fit in 32 bits") from None


def harden(index: int) -> int:
    """Return the hardened form of a non-hardened index."""
    key_index = _key_index(index)
    if key_index.IsHardened():
        raise InvalidPath(f"Index {index} outside of [0, {MAX_INDEX}]")
    return key_index.Harden().ToInt()


def is_hardened(index: int) -> bool:
    return Bip32KeyIndex.IsHardenedIndex(index)


@dataclass(frozen=True)
class DerivationPath:
    """Ordered sequence of raw 32-bit child indices."""

    indices: tuple[int, ...]

    def __post_init__(self):
        for index in self.indices:
            _key_index(index)

    @classmethod
    def parse(cls, text: str) -> "DerivationPath":
        """Parse ``m/44'/330'/0'/0/0`` style paths.

        Hardened levels may be marked with ``'``, ``h`` or ``H``.

        Raises:
            InvalidPath: On malformed text or out-of-range indices
        """
        levels = text.strip().split("/")
        try:
            parsed = Bip32PathParser.Parse(text.strip().replace("H", "h"))
        except (Bip32PathError, ValueError):
            raise InvalidPath(f"Invalid derivation path {text!r}") from None

        if not parsed.IsAbsolute():
            raise InvalidPath(f"Derivation path must start with 'm': {text!r}")
        if parsed.Length() != len(levels) - 1:
            raise InvalidPath(f"Empty level in derivation path {text!r}")

        # bip_utils accepts raw indices >= 2^31 written without a hardened mark
        for level in levels[1:]:
            if int(level.strip().rstrip("".join(_HARDENED_MARKS))) > MAX_INDEX:
                raise InvalidPath(f"Index {level!r} outside of [0, {MAX_INDEX}] in {text!r}")

        return cls(tuple(parsed.ToList()))

    @classmethod
    def bip44(
        cls,
        coin_type: int = LUNA_COIN_TYPE,
        account: int = 0,
        change: int = 0,
        index: int = 0,
    ) -> "DerivationPath":
        """Build m/44'/coin_type'/account'/change/index."""
        for level in (change, index):
            if _key_index(level).IsHardened():
                raise InvalidPath(f"Index {level} outside of [0, {MAX_INDEX}]")
        return cls((harden(44), harden(coin_type), harden(account), change, index))

    @classmethod
    def slip10(cls, coin_type: int, account: int = 0, index: int = 0) -> "DerivationPath":
        """Build the all-hardened path m/44'/coin_type'/account'/0'/index' used for ed25519."""
        return cls((harden(44), harden(coin_type), harden(account), harden(0), harden(index)))

    @property
    def depth(self) -> int:
        return len(self.indices)

    def to_bip32(self) -> Bip32Path:
        return Bip32Path(list(self.indices))

    def with_index_bumped(self, depth: int) -> "DerivationPath":
        """Return a copy with the index at ``depth`` (1-based) incremented.

        The hardened flag is preserved. This is the BIP32 recovery rule for
        an invalid child key.

        Raises:
            InvalidPath: If depth is out of range or the index would overflow
        """
        if depth < 1 or depth > len(self.indices):
            raise InvalidPath(f"Depth {depth} outside of path of depth {len(self.indices)}")

        raw = self.indices[depth - 1]
        if Bip32KeyIndex.UnhardenIndex(raw) == MAX_INDEX:
            raise InvalidPath(f"Index at depth {depth} cannot be incremented further")

        indices = list(self.indices)
        indices[depth - 1] = raw + 1
        return DerivationPath(tuple(indices))

    def __str__(self) -> str:
        return self.to_bip32().ToStr()


DEFAULT_PATH = DerivationPath.bip44()
