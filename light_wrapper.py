#!/usr/bin/env python3
"""Shim for the WiX linker that forces ``-sval`` and ``-sacl``.

Tauri's MSI bundling invokes ``light.exe``. On some Windows hosts ICE
validation fails (LGHT0217 / ICE0x); ``-sval`` disables MSI/MSM validation
and unblocks bundling. Install this as ``light.exe`` next to the original
linker renamed to ``light-real.exe``.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

REAL_EXE_NAME = "light-real.exe"
ENFORCED_FLAGS = ("-sval", "-sacl")
FALLBACK_EXIT_CODE = 1
LOG_PREFIX = "light wrapper"

log = logging.getLogger(__name__)


class RelayError(RuntimeError):
    pass


class ResolutionError(RelayError):
    pass


class MissingTargetError(RelayError):
    pass


class SpawnError(RelayError):
    pass


def resolve_self_path(argv0=None):
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    if argv0 is None:
        argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        raise ResolutionError("unable to get current exe path: argv[0] is empty")
    try:
        return Path(argv0).resolve()
    except (OSError, RuntimeError) as exc:
        raise ResolutionError("unable to get current exe path: {}".format(exc)) from exc


def derive_real_path(self_path):
    """Sibling of *self_path* named REAL_EXE_NAME. Never checks existence.

    Without a usable parent the current directory is the base, taken as an
    absolute path so the spawn cannot fall back to a PATH lookup.
    """
    self_path = Path(self_path)
    base = self_path.parent
    # roots are their own parent; a bare name has "."
    if base == self_path or base == Path(os.curdir):
        base = Path.cwd()
    return base / REAL_EXE_NAME


def ensure_real_exists(real_path):
    if not Path(real_path).exists():
        raise MissingTargetError(
            "expected real WiX linker at '{}' but it does not exist".format(real_path)
        )


def has_flag(flag, args):
    # ASCII-only case folding: "-SVAL" matches, "foo-sval" does not
    flag = flag.lower()
    return any(arg.isascii() and arg.lower() == flag for arg in args)


def augment_args(args, flags=ENFORCED_FLAGS):
    """Prepend each flag in *flags* that *args* lacks, keeping *args* verbatim.

    >>> augment_args(["-sval", "foo.wixobj"])
    ['-sacl', '-sval', 'foo.wixobj']
    """
    args = list(args)
    missing = [flag for flag in flags if not has_flag(flag, args)]
    return missing + args


def relay(real_path, args, runner=subprocess.run):
    """Run the real linker with inherited stdio and return its raw returncode."""
    command = [str(real_path)] + list(args)
    log.debug("running %s", command)
    try:
        completed = runner(command, check=False)
    except OSError as exc:
        raise SpawnError("failed to start '{}': {}".format(real_path, exc)) from exc
    return completed.returncode


def exit_code_of(returncode):
    if returncode is None:
        return FALLBACK_EXIT_CODE
    if os.name == "nt":
        # DWORD codes (NTSTATUS 0xC0000005) overflow a C long in SystemExit;
        # pass the same 32 bits back as a signed value
        returncode &= 0xFFFFFFFF
        return returncode - (1 << 32) if returncode > 0x7FFFFFFF else returncode
    # negative means the child died from a signal
    if returncode < 0:
        return FALLBACK_EXIT_CODE
    return returncode


def main(argv=None, runner=subprocess.run):
    if argv is None:
        argv = sys.argv
    logging.basicConfig(format=LOG_PREFIX + ": %(message)s", stream=sys.stderr)

    try:
        self_path = resolve_self_path(argv[0] if argv else "")
        real_path = derive_real_path(self_path)
        ensure_real_exists(real_path)
        returncode = relay(real_path, augment_args(argv[1:]), runner=runner)
    except RelayError as exc:
        log.error("%s", exc)
        return FALLBACK_EXIT_CODE
    return exit_code_of(returncode)


def run():
    raise SystemExit(main())


if __name__ == "__main__":
    run()
