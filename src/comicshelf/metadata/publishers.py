# ABOUTME: Canonical comic publisher table and alias-based publisher name normalization.
# ABOUTME: Decides whether a free-text publisher string belongs to a comic publisher at all.

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

MARVEL = "Marvel"
DC = "DC Comics"
IMAGE = "Image"
DARK_HORSE = "Dark Horse"
IDW = "IDW"
VERTIGO = "Vertigo"
BOOM = "BOOM! Studios"
VALIANT = "Valiant"
ONI_PRESS = "Oni Press"
ARCHIE = "Archie"
TITAN = "Titan"
AWA = "AWA"
AFTERSHOCK = "AfterShock"
WILDSTORM = "Wildstorm"
MAD_CAVE = "Mad Cave"
DYNAMITE = "Dynamite Entertainment"


@dataclass(frozen=True)
class PublisherTable:
    """Read-only reference data for publisher normalization.

    Attributes:
        publishers: Canonical publisher names, in declaration order. Order
            matters for filename token detection (first hit wins).
        aliases: Lowercase alias -> canonical publisher name.
    """

    publishers: tuple[str, ...]
    aliases: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for alias, canonical in self.aliases.items():
            if alias != alias.lower():
                raise ValueError(f"alias keys must be lowercase: {alias!r}")
            if canonical not in self.publishers:
                raise ValueError(f"unknown canonical publisher: {canonical!r}")
        # Freeze the mapping so a shared table can't be mutated by callers.
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))

    def is_known_publisher(self, name: str | None) -> bool:
        """Whether name is an alias or (case-insensitively) a canonical publisher."""
        if not name:
            return False
        lowered = name.lower()
        if lowered in self.aliases:
            return True
        return any(known.lower() == lowered for known in self.publishers)

    def normalize(self, name: str | None) -> str | None:
        """Map a publisher string to its canonical form.

        Aliases map to their canonical name; other known publishers are
        returned unchanged. Returns None for empty input and for anything
        that isn't a recognized comic publisher, which callers should route
        to the Unsorted bucket.
        """
        if not name:
            return None

        canonical = self.aliases.get(name.lower())
        if canonical:
            return canonical

        if self.is_known_publisher(name):
            return name

        return None

    def detect_in_filename(self, filename: str) -> str | None:
        """Return the first canonical publisher whose name appears in filename."""
        upper = filename.upper()
        for publisher in self.publishers:
            if publisher.upper() in upper:
                return publisher
        return None


DEFAULT_PUBLISHER_TABLE = PublisherTable(
    publishers=(
        MARVEL,
        DC,
        IMAGE,
        DARK_HORSE,
        IDW,
        VERTIGO,
        BOOM,
        VALIANT,
        ONI_PRESS,
        ARCHIE,
        TITAN,
        AWA,
        AFTERSHOCK,
        WILDSTORM,
        MAD_CAVE,
        DYNAMITE,
    ),
    aliases={
        "dark horse comics": DARK_HORSE,
        "dark horse": DARK_HORSE,
        "dc comics": DC,
        "dc": DC,
        "marvel comics": MARVEL,
        "marvel": MARVEL,
        "image comics": IMAGE,
        "image": IMAGE,
        "boom! studios": BOOM,
        "boom studios": BOOM,
        "boom": BOOM,
        "idw publishing": IDW,
        "idw": IDW,
        "mad cave studios": MAD_CAVE,
        "mad cave comics": MAD_CAVE,
        "dynamite comics": DYNAMITE,
        "dynamite": DYNAMITE,
        "oni press": ONI_PRESS,
        "wildstorm productions": WILDSTORM,
    },
)
