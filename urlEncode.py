#!/usr/bin/env python3
"""
urlEncode.py   (PyYAML + qrcode)

STDIN (or a yaml file)  →  https://meshtastic.org/e/#<payload>

  urlEncode.py config.yaml             your own channels / lora block
  urlEncode.py --network               the public network defaults
  urlEncode.py --private "Family"      new channel with a random 256-bit key
  ... --qr share.png                   also render a QR code (- = terminal)

No protoc needed: the ChannelSet is serialized in-process.
"""

import argparse, logging, re, sys
import qrcode
import yaml
from qrcode.constants import ERROR_CORRECT_M

from channel_url import (
    DEFAULT_BASE_URL,
    generate_network_url,
    generate_private_channel_url,
    generate_url,
)
from channelset import Channel, ChannelRole, ChannelSet, ChannelSettings, RadioConfig
from keymaterial import psk_from_base64
from protolite import MalformedInputError, ProtoError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"

CHANNEL_KEYS = {"index", "role"}
SETTINGS_KEYS = {"channel_num", "psk", "name", "uplink_enabled", "downlink_enabled"}
LORA_KEYS = {"region", "modem_preset", "hop_limit", "tx_enabled", "tx_power"}


# ─────────────────────────────────────────────────────────────────────────────
def snake(s):                                  # camelCase → snake_case
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s).lower()


def _mapping(obj, where):
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise MalformedInputError(f"{where} must be a mapping, got {type(obj).__name__}")
    return {snake(str(k)): v for k, v in obj.items()}


def _role(value, where):
    if isinstance(value, str):
        try:
            return ChannelRole[value.upper()]
        except KeyError:
            raise MalformedInputError(f"{where}: unknown role {value!r}") from None
    return value


def _channel(entry, where):
    fields = _mapping(entry, where)
    # `settings: {}` keeps a present-but-empty ChannelSettings on the wire
    explicit = "settings" in fields
    nested = _mapping(fields.pop("settings", None), f"{where}.settings")
    unknown = set(nested) - SETTINGS_KEYS
    if unknown:
        raise MalformedInputError(f"{where}.settings: unknown key(s) {', '.join(sorted(unknown))}")
    fields.update(nested)

    unknown = set(fields) - CHANNEL_KEYS - SETTINGS_KEYS
    if unknown:
        raise MalformedInputError(f"{where}: unknown key(s) {', '.join(sorted(unknown))}")

    settings = {k: fields[k] for k in SETTINGS_KEYS if k in fields}
    if "psk" in settings:
        if not isinstance(settings["psk"], str):
            raise MalformedInputError(f"{where}: psk must be a base64 string")
        settings["psk"] = psk_from_base64(settings["psk"])
    return Channel(
        index=fields.get("index"),
        settings=ChannelSettings(**settings) if settings or explicit else None,
        role=_role(fields.get("role"), where),
    )


# ─────────────────────────────────────────────────────────────────────────────
def yaml_to_channel_set(data):
    """Turn our YAML dict into a ChannelSet value."""
    root = _mapping(data, "document")

    channels = root.get("channels") or []
    if not isinstance(channels, list):
        raise MalformedInputError("channels must be a list")
    built = [_channel(ch, f"channel {pos}") for pos, ch in enumerate(channels)]

    config = _mapping(root.get("config"), "config")
    for section in sorted(set(config) - {"lora"}):
        logger.warning("config.%s is not part of a share URL, ignored", section)

    lora = None
    if "lora" in config:
        fields = _mapping(config["lora"], "config.lora")
        unknown = set(fields) - LORA_KEYS
        if unknown:
            raise MalformedInputError(f"config.lora: unknown key(s) {', '.join(sorted(unknown))}")
        lora = RadioConfig(**fields)

    return ChannelSet(channels=built, lora=lora)


def write_qr(url, path):
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=8, border=2)
    qr.add_data(url)
    qr.make(fit=True)
    if path == "-":
        qr.print_ascii(out=sys.stdout)
    else:
        qr.make_image(fill_color="black", back_color="white").save(path)
        logger.info("QR code written to %s", path)


# ─────────────────────────────────────────────────────────────────────────────
def main(argv=None):
    ap = argparse.ArgumentParser(description="YAML → Meshtastic share URL")
    ap.add_argument("yaml", nargs="?", help="YAML file (default: stdin)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--network", action="store_true",
                      help="public network defaults instead of YAML")
    mode.add_argument("--private", metavar="NAME", nargs="?", const="",
                      help="private channel with a fresh random key")
    ap.add_argument("--base-url", default=DEFAULT_BASE_URL,
                    help=f"URL prefix before '#' (default: {DEFAULT_BASE_URL})")
    ap.add_argument("--qr", metavar="PATH", help="write a QR code PNG ('-' = terminal)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args(argv)
    if args.yaml and (args.network or args.private is not None):
        ap.error("a YAML file cannot be combined with --network or --private")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=LOG_FORMAT, stream=sys.stderr)

    psk = None
    try:
        if args.private is not None:
            url, psk = generate_private_channel_url(args.private or None, args.base_url)
        elif args.network:
            url = generate_network_url(args.base_url)
        else:
            # Decide where to read from:
            #  • if a filename was given and not "-", read that file
            #  • else read stdin
            if args.yaml and args.yaml != "-":
                try:
                    with open(args.yaml, "r", encoding="utf-8") as yaml_src:
                        data = yaml.safe_load(yaml_src)
                except OSError as exc:
                    sys.exit(f"Cannot read {args.yaml}: {exc.strerror}")
            else:
                data = yaml.safe_load(sys.stdin)
            url = generate_url(yaml_to_channel_set(data), args.base_url)
    except yaml.YAMLError as exc:
        sys.exit(f"Invalid YAML: {exc}")
    except ProtoError as exc:
        sys.exit(f"Invalid configuration: {exc}")

    # PNG before stdout; a failed write prints nothing
    if args.qr and args.qr != "-":
        try:
            write_qr(url, args.qr)
        except (OSError, ValueError) as exc:
            sys.exit(f"Cannot write {args.qr}: {getattr(exc, 'strerror', None) or exc}")

    print(url)
    if psk is not None:
        print(f"psk: {psk}")
    if args.qr == "-":
        write_qr(url, "-")


if __name__ == "__main__":
    main()
