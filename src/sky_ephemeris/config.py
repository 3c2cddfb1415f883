"""Configuration: SPICE kernel paths and leap-second file from environment."""

import os
from pathlib import Path

# Env var overrides with sensible defaults.
DEFAULT_SPICE_PATH = '/var/www/SPICE/'
DEFAULT_KERNEL_LIST = 'SPICE_ephemeris.txt'


def get_spice_path() -> str:
    """Return SPICE kernel root directory (SPICE_PATH env var or default).

    Returns:
        Path string.
    """
    return os.environ.get('SPICE_PATH', DEFAULT_SPICE_PATH)


def get_kernel_list_path() -> Path:
    """Return the file listing planetary SPK kernels by version.

    The file name comes from SKY_EPHEMERIS_KERNELS (default
    SPICE_ephemeris.txt) and is resolved under SPICE_PATH unless absolute.

    Returns:
        Path to the kernel list file (may not exist).
    """
    name = os.environ.get('SKY_EPHEMERIS_KERNELS', '').strip() or DEFAULT_KERNEL_LIST
    path = Path(name)
    if path.is_absolute():
        return path
    return Path(get_spice_path()) / path


def get_leapsecs_path() -> str:
    """Return path to a NAIF LSK leap seconds file for rms-julian.

    Prefers JULIAN_LEAPSECS, then the newest naif00NN.tls under SPICE_PATH,
    then leapsecs.txt (which makes rms-julian fall back to its bundled LSK).

    Returns:
        Path string to LSK or leapsecs file.
    """
    path = os.environ.get('JULIAN_LEAPSECS', '').strip()
    if path:
        return path
    base = Path(get_spice_path())
    lsks = sorted(base.glob('naif00[0-9][0-9].tls')) if base.is_dir() else []
    if lsks:
        return str(lsks[-1])
    return str(base / 'leapsecs.txt')
