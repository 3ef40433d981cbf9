from __future__ import annotations

from packaging.utils import canonicalize_name


# Ecosystem names defined by the OSV schema; a ":<release>" suffix is allowed on most of them.
KNOWN_ECOSYSTEMS: frozenset[str] = frozenset(
    {
        "AlmaLinux",
        "Alpine",
        "Android",
        "Bioconductor",
        "Bitnami",
        "Chainguard",
        "ConanCenter",
        "CRAN",
        "crates.io",
        "Debian",
        "GHC",
        "GitHub Actions",
        "Go",
        "Hackage",
        "Hex",
        "Linux",
        "Mageia",
        "Maven",
        "npm",
        "NuGet",
        "openSUSE",
        "OSS-Fuzz",
        "Packagist",
        "Photon OS",
        "Pub",
        "PyPI",
        "Red Hat",
        "Rocky Linux",
        "RubyGems",
        "SUSE",
        "SwiftURL",
        "Ubuntu",
        "Wolfi",
    }
)

SEMVER_ECOSYSTEMS: frozenset[str] = frozenset(
    {"npm", "Go", "crates.io", "SwiftURL", "Hex", "Pub", "GitHub Actions", "Bitnami"}
)
NATURAL_ECOSYSTEMS: frozenset[str] = frozenset({"Maven", "RubyGems", "NuGet", "Packagist", "CRAN", "Hackage"})
PEP440_ECOSYSTEMS: frozenset[str] = frozenset({"PyPI"})

# Registries whose package names are case-insensitive.
_CASE_INSENSITIVE = frozenset({"npm", "NuGet", "Packagist", "Hex", "Pub"})


def base_ecosystem(ecosystem: str) -> str:
    return ecosystem.split(":", 1)[0]


def is_known_ecosystem(ecosystem: str) -> bool:
    return base_ecosystem(ecosystem) in KNOWN_ECOSYSTEMS


def normalize_package_name(ecosystem: str, name: str) -> str:
    """Return the lookup form of a package name.

    PyPI names follow PEP 503 normalization; case-insensitive registries are
    lower-cased; everything else is kept as written.
    """
    base = base_ecosystem(ecosystem)
    if base == "PyPI":
        return canonicalize_name(name)
    if base in _CASE_INSENSITIVE:
        return name.lower()
    return name


def package_key(ecosystem: str, name: str) -> tuple[str, str]:
    return ecosystem, normalize_package_name(ecosystem, name)
