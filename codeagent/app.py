"""Command-line entry point: build the agent and start the REPL."""

import argparse
import asyncio
import sys
from typing import List, Optional

from codeagent.adapters.cli.repl import Repl
from codeagent.adapters.llm.ollama_client import OllamaClient
from codeagent.config import AgentConfig
from codeagent.domain.agent import CodingAgent
from codeagent.domain.errors import TransportError


def _log(msg: str):
    print(msg, file=sys.stderr)


def build_parser(config: AgentConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codeagent", description="Ollama-powered coding agent")
    parser.add_argument("--url", default=config.ollama_url, help="Ollama API URL")
    parser.add_argument("--model", default=config.model, help="Model name to use")
    parser.add_argument(
        "--prompts", default=config.prompt_dir,
        help="Directory containing system prompt files (*.txt)",
    )
    parser.add_argument("--system", default=config.system_prompt, help="System prompt to use")
    parser.add_argument("--workdir", default=None, help="Working directory for actions")
    parser.add_argument(
        "--auto", action="store_true", default=config.auto_execute,
        help="Execute detected actions without /execute",
    )
    return parser


async def create_agent(args: argparse.Namespace, config: AgentConfig) -> CodingAgent:
    client = OllamaClient(args.url, request_timeout=config.request_timeout)
    agent = CodingAgent(
        client,
        model=args.model,
        auto_execute=args.auto,
        command_timeout=config.command_timeout_or_none,
    )

    if args.workdir:
        agent.set_work_dir(args.workdir)

    if args.prompts:
        try:
            count = agent.load_prompt_directory(args.prompts)
            print(f"✓ Loaded {count} system prompt(s) from: {args.prompts}")
        except OSError as e:
            _log(f"Warning: {e}")

    if args.system:
        prompt = agent.get_system_prompt(args.system)
        agent.set_system_prompt(prompt if prompt is not None else args.system)
        print("✓ System prompt set")

    try:
        await agent.refresh_model_params()
    except TransportError as e:
        _log(f"Warning: could not fetch model details: {e}")
    return agent


async def _amain(argv: Optional[List[str]]) -> int:
    config = AgentConfig.from_env()
    args = build_parser(config).parse_args(argv)
    try:
        agent = await create_agent(args, config)
    except NotADirectoryError as e:
        print(f"Error: {e}")
        return 1

    return await Repl(agent).run()


def main(argv: Optional[List[str]] = None) -> int:
    return asyncio.run(_amain(argv))


if __name__ == "__main__":
    raise SystemExit(main())
