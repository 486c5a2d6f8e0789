# /orchestrator.py

"""
📌 Local chat runner for the RAG pipeline.

This script demonstrates:
1. Building the pipeline from environment settings through the DI container
2. Warming up the chat model with progress reporting
3. Ingesting a PDF through the worker message protocol
4. Chatting about its contents, keeping the conversation history

Run this script with: localrag-chat path/to/document.pdf
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .di.container import Container
from .models import RAGConfig, env_settings
from .models.messages import (
    ChatMessage,
    CompleteEvent,
    ErrorEvent,
    InitProgressEvent,
    LogEvent,
    OutboundMessage,
)
from .worker import RAGWorker

# Silence HTTP client logging (request/response lines)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)


class ConsoleOutbox:
    """Prints worker events and remembers the last terminal one."""

    def __init__(self):
        self.last: Optional[OutboundMessage] = None

    def __call__(self, event: OutboundMessage) -> None:
        if isinstance(event, InitProgressEvent):
            print(f"⏳ Loading model... {event.percent:.0f}%")
        elif isinstance(event, LogEvent):
            logging.debug(f"Worker log: {event.data}")
        elif isinstance(event, CompleteEvent):
            self.last = event
        elif isinstance(event, ErrorEvent):
            self.last = event
            print(f"❌ {event.message}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with a PDF using a local model server.")
    parser.add_argument("pdf", type=Path, help="PDF document to ingest")
    parser.add_argument("--model", default=None, help="Override the chat model")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    # Step 1: Build configuration and the container
    config = RAGConfig.from_settings(env_settings)
    if args.model:
        config.chat_model = args.model

    container = Container()
    container.config.from_dict(config.to_container_config())
    pipeline = container.rag_pipeline()

    outbox = ConsoleOutbox()
    worker = RAGWorker(pipeline, emit=outbox)

    async with pipeline:
        # Step 2: Warm up (a failure was already printed by the outbox)
        try:
            await worker.start()
        except Exception:
            return

        # Step 3: Ingest the document
        print(f"\n📄 Ingesting '{args.pdf}'...")
        await worker.handle({"type": "embed", "payload": args.pdf.read_bytes(), "name": args.pdf.stem})
        if not isinstance(outbox.last, CompleteEvent):
            return
        print(f"✅ {outbox.last.message.content}")

        # Step 4: Chat
        history: List[ChatMessage] = []
        while True:
            try:
                question = (await asyncio.to_thread(input, "\n🔍 You: ")).strip()
            except EOFError:
                break
            if not question or question.lower() in {"exit", "quit"}:
                break

            history.append(ChatMessage(role="user", content=question))
            await worker.handle(
                {"type": "query", "messages": [m.model_dump() for m in history]}
            )
            if isinstance(outbox.last, CompleteEvent):
                history.append(outbox.last.message)
                print(f"💬 Assistant: {outbox.last.message.content}")
            else:
                # Keep the history aligned with what the model has actually answered
                history.pop()

        logging.info(pipeline.usage_report())


def run_main():
    # Configure logging for visibility
    logging.basicConfig(
        level=env_settings.log_level.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Bye")


if __name__ == "__main__":
    run_main()
