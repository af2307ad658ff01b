from __future__ import annotations

import argparse
import asyncio

from .commands import cmd_assert_async, cmd_attach_async, cmd_tags_async


BACKENDS = ["arweaveWallet", "bundlr", "warp"]


def main() -> None:
    parser = argparse.ArgumentParser(prog="factmarket")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_attach = sub.add_parser("attach", help="Attach a fact market to an existing transaction")
    p_attach.add_argument("tx")
    p_attach.add_argument("wallet")
    p_attach.add_argument("--rebut")
    p_attach.add_argument("--use", choices=BACKENDS)
    p_attach.add_argument("--config")
    p_attach.add_argument("--verbose", action="store_true")

    p_assert = sub.add_parser("assert", help="Deploy an assertion (atomic fact market) from a file")
    p_assert.add_argument("file")
    p_assert.add_argument("wallet")
    p_assert.add_argument("--title", required=True)
    p_assert.add_argument("--content-type", default="text/plain")
    p_assert.add_argument("--description")
    p_assert.add_argument("--topic", action="append", default=[])
    p_assert.add_argument("--rebut")
    p_assert.add_argument("--use", choices=BACKENDS)
    p_assert.add_argument("--config")

    p_tags = sub.add_parser("tags", help="Show the merged tags attach would submit")
    p_tags.add_argument("tx")
    p_tags.add_argument("--config")

    args = parser.parse_args()
    if args.cmd == "attach":
        asyncio.run(
            cmd_attach_async(
                args.tx,
                args.wallet,
                rebut_tx=args.rebut,
                use=args.use,
                config_path=args.config,
                verbose=args.verbose,
            )
        )
    elif args.cmd == "assert":
        asyncio.run(
            cmd_assert_async(
                args.file,
                args.wallet,
                title=args.title,
                content_type=args.content_type,
                description=args.description,
                topics=args.topic,
                rebut_tx=args.rebut,
                use=args.use,
                config_path=args.config,
            )
        )
    elif args.cmd == "tags":
        asyncio.run(cmd_tags_async(args.tx, config_path=args.config))


if __name__ == "__main__":
    main()
