#!/usr/bin/env python3
"""
urlDecode.py  –  Meshtastic share-URL → YAML

Decodes the ChannelSet in-process and prints it in the same YAML layout
urlEncode.py reads, so the output can be edited and re-encoded.
"""

import argparse, logging, re, sys
import yaml

from channel_url import decode_url
from keymaterial import psk_to_base64
from protolite import ProtoError

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"


# -----------------------------------------------------------------------------
# helpers ---------------------------------------------------------------------
def camel(s: str) -> str:
    """snake_case -> camelCase"""
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), s, 0)


def channel_set_to_yaml(channel_set) -> dict:
    """ChannelSet → plain dict (channels with name/psk first, lora sorted)."""
    root = {"channels": []}
    for ch in channel_set.channels:
        entry = {}
        settings = ch.settings
        if settings is not None:
            if settings.name is not None:
                entry["name"] = settings.name
            if settings.psk is not None:
                entry["psk"] = psk_to_base64(settings.psk)
            for key in ("channel_num", "uplink_enabled", "downlink_enabled"):
                value = getattr(settings, key)
                if value is not None:
                    entry[camel(key)] = value
            if not entry:
                entry["settings"] = {}
        if ch.index is not None:
            entry["index"] = ch.index
        if ch.role is not None:
            entry["role"] = ch.role.name
        root["channels"].append(entry)

    lora = channel_set.lora
    if lora is not None:
        values = {camel(k): getattr(lora, k)
                  for k in ("region", "modem_preset", "hop_limit", "tx_enabled", "tx_power")
                  if getattr(lora, k) is not None}
        root["config"] = {"lora": {k: values[k] for k in sorted(values)}}
    return root


# -----------------------------------------------------------------------------
def main(argv=None):
    ap = argparse.ArgumentParser(description="Meshtastic share URL → YAML")
    ap.add_argument(
        "url",
        nargs="?",
        help="Meshtastic share URL (reads stdin if omitted)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=LOG_FORMAT, stream=sys.stderr)

    # -------- where to get the URL string ----------
    if args.url and args.url != "-":
        url_text = args.url
    else:                                  # piped or '-' sentinel
        url_text = sys.stdin.read().strip()
        if not url_text:
            sys.exit("No URL provided on stdin.")
    # Grab the first token that looks like a share-URL
    m = re.search(r"https?://\S*#[A-Za-z0-9_-]*", url_text)
    if not m:
        sys.exit("Could not find a share-URL in the input.")

    try:
        channel_set = decode_url(m.group(0))
    except ProtoError as exc:
        sys.exit(f"Could not decode share URL: {exc}")

    yaml.safe_dump(channel_set_to_yaml(channel_set), sys.stdout,
                   sort_keys=False, default_flow_style=False, allow_unicode=True)


if __name__ == "__main__":
    main()
