"""SPICE kernel loading for the planetary binary ephemeris."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import cspyce

from sky_ephemeris.config import get_kernel_list_path, get_spice_path
from sky_ephemeris.spice.common import get_state

logger = logging.getLogger(__name__)

POOL_KERNELS = ('leapseconds.ker', 'p_constants.ker')


def _load_pool() -> None:
    """Furnish leap-second and constants kernels under SPICE_PATH once."""
    state = get_state()
    if state.pool_loaded:
        return
    base = Path(get_spice_path())
    for ker in POOL_KERNELS:
        p = base / ker
        if p.exists():
            try:
                cspyce.furnsh(str(p))
            except Exception as e:
                logger.warning('Failed to load %s: %s', p, e)
    state.pool_loaded = True


def _read_kernel_list(config_path: Path, version: int) -> tuple[int, list[Path]]:
    """Return (version, kernel paths) selected from a kernel list file.

    Each non-comment line is `version,"filename"`; version 0 selects the
    first version listed.
    """
    load_version = version
    selected: list[Path] = []
    with config_path.open() as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('!'):
                continue
            parts = line.split(',')
            if len(parts) < 2:
                logger.error(
                    '%s line %d: expected 2 fields (version filename), got %d: %r',
                    config_path.name,
                    line_no,
                    len(parts),
                    line,
                )
                continue
            try:
                v = int(parts[0])
            except ValueError as e:
                logger.error(
                    '%s line %d: version must be integer: %r - %s',
                    config_path.name,
                    line_no,
                    line,
                    e,
                )
                continue
            if load_version == 0:
                load_version = v
            if v == load_version:
                selected.append(config_path.parent / parts[1].strip().strip('"'))
    return load_version, selected


def load_ephemeris_kernels(
    paths: Iterable[str | Path] | None = None,
    version: int = 0,
) -> tuple[bool, str | None]:
    """Load planetary SPK kernels for the binary ephemeris.

    Returns (True, None) if at least one kernel loaded, (False, reason) on failure.

    paths: explicit kernel files; if None, kernels are taken from the kernel
        list file under SPICE_PATH (see config.get_kernel_list_path).
    version: kernel list version, or 0 for the first one listed.
    """
    state = get_state()
    if paths is None:
        config_path = get_kernel_list_path()
        if not config_path.exists():
            logger.warning('Kernel list not found: %s', config_path)
            return (
                False,
                f'{config_path.name} not found under {config_path.parent}. '
                'Set SPICE_PATH to a kernel tree that includes it, or pass kernel paths.',
            )
        version, kernel_paths = _read_kernel_list(config_path, version)
    else:
        kernel_paths = [Path(p) for p in paths]
    _load_pool()
    loaded = False
    for kpath in kernel_paths:
        if not kpath.exists():
            logger.warning('Kernel file does not exist: %s', kpath)
            continue
        try:
            cspyce.furnsh(str(kpath))
        except Exception as e:
            logger.warning('Failed to load %s: %s', kpath, e)
            continue
        state.kernel_files.append(str(kpath))
        loaded = True
    if not loaded:
        return (False, f'No ephemeris kernels (version {version}) could be loaded.')
    state.ephemeris_loaded = True
    state.version = version
    logger.info('Loaded %d ephemeris kernel(s), version %d', len(state.kernel_files), version)
    return (True, None)


def clear_kernels() -> None:
    """Unload every kernel from the cspyce pool and reset the loader state."""
    cspyce.kclear()
    get_state().reset()
