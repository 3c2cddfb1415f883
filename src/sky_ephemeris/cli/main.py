"""CLI entry point: sky-ephemeris ephemeris|riseset|passes subcommands."""

from __future__ import annotations

import argparse
import logging
import math
import os
import sys
from typing import NoReturn, TextIO, cast

from sky_ephemeris.angle_utils import dms_string, parse_angle
from sky_ephemeris.bodies import CelestialBody, luna
from sky_ephemeris.constants import RAD_PER_DEG, planet_id_from_name
from sky_ephemeris.ephemeris import Ephemeris
from sky_ephemeris.events import (
    HORIZON_POINT,
    HORIZON_SUN_MOON,
    TWILIGHT_ASTRONOMICAL,
    TWILIGHT_CIVIL,
    TWILIGHT_NAUTICAL,
    Event,
    Pass,
    find_satellite_passes,
    rise_transit_set,
)
from sky_ephemeris.frame import Frame, ObserverFrame
from sky_ephemeris.orbit import moon_orbit
from sky_ephemeris.satellite import read_tle_file
from sky_ephemeris.spice.load import load_ephemeris_kernels
from sky_ephemeris.time_utils import format_jd, jed_from_jd, parse_datetime
from sky_ephemeris.vectors import to_spherical

logger = logging.getLogger(__name__)

HORIZONS = {
    'point': HORIZON_POINT,
    'sun': HORIZON_SUN_MOON,
    'civil': TWILIGHT_CIVIL,
    'nautical': TWILIGHT_NAUTICAL,
    'astronomical': TWILIGHT_ASTRONOMICAL,
}


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or SKY_EPHEMERIS_LOG)."""
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = os.environ.get('SKY_EPHEMERIS_LOG', '').upper()
    if env_level in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        level = getattr(logging, env_level)
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _angle_arg(text: str) -> float:
    """argparse type: sexagesimal or decimal degrees, returned in degrees."""
    value = parse_angle(text)
    if value is None:
        raise argparse.ArgumentTypeError(f'invalid angle: {text!r}')
    return value


def _time_arg(text: str) -> float:
    """argparse type: date/time string, returned as a civil Julian Date."""
    jd = parse_datetime(text)
    if jd is None:
        raise argparse.ArgumentTypeError(f'invalid date/time: {text!r}')
    return jd


def _load_kernels(args: argparse.Namespace) -> None:
    """Load SPK kernels from --kernels, or from SPICE_PATH when it is set.

    Without kernels, planets and the Moon fall back to mean orbital elements.
    """
    if args.kernels:
        ok, reason = load_ephemeris_kernels(args.kernels)
    elif os.environ.get('SPICE_PATH'):
        ok, reason = load_ephemeris_kernels()
    else:
        logger.info('No SPICE kernels configured; using mean orbital elements')
        return
    if not ok:
        raise RuntimeError(reason or 'Failed to load ephemeris kernels')


def _body_from_name(name: str, jd: float) -> CelestialBody:
    """Sun, a major planet, or the Moon by name or planet number.

    Raises:
        ValueError: If the name is not recognized.
    """
    if name.strip().lower() in ('moon', 'luna'):
        return luna(moon_orbit(jed_from_jd(jd)))
    planet_id = planet_id_from_name(name)
    if planet_id is None:
        raise ValueError(f'Unknown body: {name!r}')
    return CelestialBody.planet(planet_id)


def _observer(engine: Ephemeris, args: argparse.Namespace, jd: float) -> ObserverFrame:
    return ObserverFrame(
        engine,
        lon=args.lon * RAD_PER_DEG,
        lat=args.lat * RAD_PER_DEG,
        height_m=args.height,
        zone=getattr(args, 'zone', 0.0),
        jd=jd,
    )


def _format_event(label: str, event: Event) -> str:
    if not event.occurs:
        return f'{label:<9} ---'
    return (
        f'{label:<9} {format_jd(event.time)}  '
        f'az {math.degrees(event.azimuth):7.2f}  alt {math.degrees(event.altitude):6.2f}'
    )


def write_ephemeris(out: TextIO, body: CelestialBody, frame: ObserverFrame) -> None:
    """Write the apparent position and brightness of a computed body."""
    state = body.state
    ra, dec, _ = to_spherical(frame.transform(Frame.FUNDAMENTAL, Frame.EQUATORIAL, state.direction))
    azimuth, altitude = frame.horizon_coordinates(state.direction)
    phase = '---' if state.phase is None else f'{math.degrees(state.phase):.2f} deg'
    magnitude = '---' if state.magnitude is None else f'{state.magnitude:.2f}'
    out.write(f'Body:       {body.name}\n')
    out.write(f'Time (UTC): {format_jd(frame.jd)}\n')
    out.write(f'RA:         {dms_string(math.degrees(ra) / 15.0, "hms", 2).lstrip("+")}\n')
    out.write(f'Dec:        {dms_string(math.degrees(dec), "dms", 1)}\n')
    out.write(f'Azimuth:    {math.degrees(azimuth):.3f} deg\n')
    out.write(f'Altitude:   {math.degrees(altitude):.3f} deg\n')
    out.write(f'Distance:   {state.distance:.8f} AU ({state.distance_km:.0f} km)\n')
    out.write(f'Phase:      {phase}\n')
    out.write(f'Magnitude:  {magnitude}\n')


def write_pass(out: TextIO, title: str, result: Pass) -> None:
    """Write one rise/transit/set triple."""
    out.write(f'{title}\n')
    out.write(_format_event('Rise', result.rising) + '\n')
    out.write(_format_event('Transit', result.transit) + '\n')
    out.write(_format_event('Set', result.setting) + '\n')


def _ephemeris_cmd(args: argparse.Namespace) -> int:
    """Run the ephemeris subcommand.

    Returns:
        Exit code 0 on success, 1 on error.
    """
    try:
        _load_kernels(args)
        engine = Ephemeris()
        body = _body_from_name(args.body, args.time)
        frame = _observer(engine, args, args.time)
        engine.compute_ephemeris(body, frame)
    except (ValueError, RuntimeError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    write_ephemeris(sys.stdout, body, frame)
    return 0


def _riseset_cmd(args: argparse.Namespace) -> int:
    """Run the riseset subcommand.

    Returns:
        Exit code 0 on success, 1 on error.
    """
    try:
        _load_kernels(args)
        engine = Ephemeris()
        # Local noon of the requested date
        today = args.date - args.zone / 24.0 + 0.5
        body = _body_from_name(args.body, today)
        frame = _observer(engine, args, today)
        if args.horizon in HORIZONS:
            alt = HORIZONS[args.horizon]
        else:
            deg = parse_angle(args.horizon)
            if deg is None:
                raise ValueError(f'Invalid horizon: {args.horizon!r}')
            alt = deg * RAD_PER_DEG
        result = rise_transit_set(engine, frame, body, today, alt)
    except (ValueError, RuntimeError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    write_pass(sys.stdout, f'{body.name} on {format_jd(args.date)[:10]}', result)
    return 0


def _passes_cmd(args: argparse.Namespace) -> int:
    """Run the passes subcommand.

    Returns:
        Exit code 0 on success, 1 on error.
    """
    if args.stop <= args.start:
        print('Error: --stop must be after --start', file=sys.stderr)
        return 1
    try:
        _load_kernels(args)
        element_sets = read_tle_file(args.tle)
    except (OSError, ValueError, RuntimeError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    if args.name:
        wanted = args.name.strip().lower()
        element_sets = [
            e for e in element_sets if e.name.lower() == wanted or str(e.norad_number) == wanted
        ]
    if not element_sets:
        print('Error: no matching element sets', file=sys.stderr)
        return 1

    engine = Ephemeris()
    frame = _observer(engine, args, args.start)
    min_alt = args.min_alt * RAD_PER_DEG
    for elements in element_sets:
        satellite = CelestialBody.satellite(elements)
        passes: list[Pass] = []
        count = find_satellite_passes(
            engine, frame, satellite, args.start, args.stop, min_alt, passes
        )
        sys.stdout.write(f'{satellite.name} ({elements.norad_number}): {count} pass(es)\n')
        for n, result in enumerate(passes, start=1):
            write_pass(sys.stdout, f'Pass {n}', result)
    return 0


def _add_observer_args(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        '--lat', type=_angle_arg, default=0.0, help='Latitude, degrees north (e.g. 40:26:46)'
    )
    sub.add_argument(
        '--lon', type=_angle_arg, default=0.0, help='Longitude, degrees east (e.g. -79:58:56)'
    )
    sub.add_argument('--height', type=float, default=0.0, help='Height above ellipsoid (m)')
    sub.add_argument(
        '--kernels', type=str, nargs='*', default=None, help='SPK kernel files to load'
    )
    sub.add_argument('-v', '--verbose', action='store_true', help='Show DEBUG logs')


def main() -> int:
    """Entry point for sky-ephemeris CLI (ephemeris | riseset | passes).

    Returns:
        Exit code 0 on success, 1 on failure.
    """
    parser = argparse.ArgumentParser(
        prog='sky-ephemeris',
        description='Apparent positions, rise/transit/set times, and satellite passes.',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    ephem_parser = subparsers.add_parser('ephemeris', help='Position and magnitude of a body')
    ephem_parser.add_argument('body', type=str, help='Sun, Moon, planet name or number')
    ephem_parser.add_argument(
        '--time', type=_time_arg, required=True, help='UTC time (e.g. 2020-03-20 12:00)'
    )
    _add_observer_args(ephem_parser)
    ephem_parser.set_defaults(func=_ephemeris_cmd)

    rise_parser = subparsers.add_parser('riseset', help='Rise, transit, and set for one day')
    rise_parser.add_argument('body', type=str, help='Sun, Moon, planet name or number')
    rise_parser.add_argument('--date', type=_time_arg, required=True, help='Local date (YYYY-MM-DD)')
    rise_parser.add_argument(
        '--zone', type=float, default=0.0, help='Time zone, hours east of Greenwich'
    )
    rise_parser.add_argument(
        '--horizon',
        type=str,
        default='point',
        help='point, sun, civil, nautical, astronomical, or an altitude in degrees',
    )
    _add_observer_args(rise_parser)
    rise_parser.set_defaults(func=_riseset_cmd)

    pass_parser = subparsers.add_parser('passes', help='Satellite passes from a TLE file')
    pass_parser.add_argument('--tle', type=str, required=True, help='Two-line element file')
    pass_parser.add_argument('--start', type=_time_arg, required=True, help='Start time (UTC)')
    pass_parser.add_argument('--stop', type=_time_arg, required=True, help='Stop time (UTC)')
    pass_parser.add_argument(
        '--min-alt', type=float, default=10.0, help='Minimum altitude (deg)'
    )
    pass_parser.add_argument(
        '--name', type=str, default=None, help='Only the satellite with this name or number'
    )
    _add_observer_args(pass_parser)
    pass_parser.set_defaults(func=_passes_cmd)

    args = parser.parse_args()
    _configure_logging(verbose=args.verbose)
    return cast(int, args.func(args))


def cli_main() -> NoReturn:
    """Entry point for console_scripts; calls main() and exits with its return code."""
    sys.exit(main())


if __name__ == '__main__':
    sys.exit(main())
