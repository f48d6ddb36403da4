#!/usr/bin/env python3
"""
Ask one question and stream the answer to stdout.

Usage:
    python run.py <tenant_id> "How many clicks did my Amazon campaigns get last week?"
    python run.py <tenant_id> --conversation c1 "And the week before?"
"""

import asyncio
import sys
import uuid
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from app.container import container
from app.services.answer.pipeline import DONE_MARKER
from settings.logging import setup_logging

logger = setup_logging(level="WARNING", to_file=True)


async def ask(tenant_id: str, conversation_id: str, question: str) -> None:
    await container.init()
    try:
        async for chunk in container.pipeline.stream(tenant_id, conversation_id, question):
            if chunk != DONE_MARKER:
                print(chunk, end="", flush=True)
        print()
    finally:
        await container.close()


def main():
    args = sys.argv[1:]
    conversation_id = None
    if "--conversation" in args:
        i = args.index("--conversation")
        if i + 1 >= len(args):
            print(__doc__)
            sys.exit(1)
        conversation_id = args[i + 1]
        args = args[:i] + args[i + 2 :]

    if len(args) < 2:
        print(__doc__)
        sys.exit(1)

    tenant_id, question = args[0], " ".join(args[1:])
    asyncio.run(ask(tenant_id, conversation_id or uuid.uuid4().hex, question))


if __name__ == "__main__":
    main()
