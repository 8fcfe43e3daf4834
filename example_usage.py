#!/usr/bin/env python3
"""
Basic usage examples for the Taobao Open Platform client.

Usage:
    python example_usage.py path/to/taobao.yml [environment]
"""

import logging
import sys

from open_taobao import ApiError, OpenTaobaoError, TaobaoClient, load_config


def main():
    """Run basic usage examples."""
    if len(sys.argv) < 2:
        print(__doc__)
        return 1

    logging.basicConfig(level=logging.DEBUG)

    environment = sys.argv[2] if len(sys.argv) > 2 else None
    config = load_config(sys.argv[1], environment)

    print("=== Taobao client usage examples ===\n")
    print(f"   Endpoint: {config.endpoint}")
    print(f"   App key:  {config.app_key}\n")

    with TaobaoClient(config) as client:
        print("1. Signed url (GET)...")
        print(f"   {client.url({'method': 'taobao.time.get'})}\n")

        try:
            print("2. Soft GET: the error envelope is returned as data...")
            result = client.get({"method": "taobao.time.get"})
            print(f"   {result}\n")

            print("3. Strict POST: an error envelope raises ApiError...")
            result = client.post_strict({
                "method": "taobao.itemcats.get",
                "fields": "cid,parent_cid,name,is_parent",
                "parent_cid": 0,
            })
            print(f"   {result}\n")
        except ApiError as e:
            print(f"   ✗ Gateway error {e.code}: {e.msg} ({e.sub_code})")
            return 1
        except OpenTaobaoError as e:
            print(f"   ✗ {e.kind.value} error: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
