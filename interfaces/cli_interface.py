import asyncio
import json
import logging
import sys
import argparse
import time
from typing import Any, Dict, Optional

from agents import AGENT_CLASSES, AIAgentBase, AgentError, Message, MessageKind
from runtime.agent_config import load_agent_config, resolve_api_key

logger = logging.getLogger(__name__)

KIND_NAMES = [kind.value for kind in MessageKind]


def parse_payload(raw: str) -> Any:
    """JSON payloads are decoded; anything else is sent as plain text"""
    raw = raw.strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_input_line(line: str) -> Message:
    """
    Turn an interactive line into a message.

    Lines look like `<kind> <payload>`. A line that does not start with a known
    kind is sent as a query with the whole line as payload.
    """
    head, _, rest = line.strip().partition(' ')
    if head.lower() in KIND_NAMES:
        return Message.create(head.lower(), parse_payload(rest), sender="cli")
    return Message.create(MessageKind.QUERY, parse_payload(line), sender="cli")


class CLIInterface:
    """
    Command Line Interface for agent interactions

    Sends messages to one agent, either once (single-command mode) or in an
    interactive loop.
    """

    def __init__(self, agent: AIAgentBase, verbose: bool = False):
        self.agent = agent
        self.verbose = verbose
        self.running = True

        if verbose:
            logging.getLogger().setLevel(logging.INFO)
        else:
            logging.getLogger().setLevel(logging.ERROR)

    async def interactive_mode(self):
        """Run interactive CLI mode"""
        self._print_welcome()
        await self.agent.start()

        try:
            while self.running:
                try:
                    user_input = await self._get_user_input()

                    if not user_input:
                        continue

                    if user_input.lower() in ['exit', 'quit', 'q']:
                        break
                    elif user_input.lower() in ['help', 'h']:
                        self._print_help()
                        continue
                    elif user_input.lower() == 'status':
                        self._print_status()
                        continue

                    await self._process_message(parse_input_line(user_input))

                except KeyboardInterrupt:
                    print("\n\n👋 Goodbye!")
                    break
        finally:
            await self.agent.stop()

    async def single_command_mode(self, kind: str, payload: Any):
        """Process a single message and exit"""
        await self.agent.start()
        try:
            await self._process_message(Message.create(kind, payload, sender="cli"))
        finally:
            await self.agent.stop()

    async def _get_user_input(self) -> str:
        """Get user input asynchronously"""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, lambda: input("💬 You: ").strip())
        except EOFError:
            return "exit"

    async def _process_message(self, message: Message):
        """Send one message through the agent and display the response"""
        start_time = time.time()
        try:
            response = await self.agent.process_message(message)
        except AgentError as e:
            print(f"\n❌ Agent Error: {e}")
            return
        except Exception as e:
            print(f"\n❌ Request failed: {e}")
            if self.verbose:
                logger.exception("Agent processing error:")
            return

        total_time = int((time.time() - start_time) * 1000)
        self._display_response(response.to_dict(), total_time)

    def _display_response(self, response: Dict[str, Any], total_time: int):
        status_icon = "✅" if response.get("success") else "❌"
        print(f"\n{status_icon} {response.get('role')} agent • {total_time / 1000:.1f}s")
        print(json.dumps(response.get("data"), indent=2, default=str))
        if response.get("error"):
            print(f"   • Error: {response['error']}")
        print()

    def _print_status(self):
        print(json.dumps(self.agent.get_status().to_dict(), indent=2, default=str))

    def _print_welcome(self):
        print("=" * 60)
        print(f"🤖 {self.agent.name}")
        print("=" * 60)
        print(self.agent.description)
        print("\nSend messages as: <kind> <json or text>")
        print(f"Kinds: {', '.join(KIND_NAMES)}")
        print("Commands: help, status, exit")
        print("=" * 60)
        print()

    def _print_help(self):
        print("\n📚 Help")
        print("  query {\"topic\": \"homework-status\"}")
        print("  command {\"action\": \"track-homework\", \"data\": {\"subject\": \"Math\", \"title\": \"Ch. 4\", \"due_date\": \"2026-11-02\"}}")
        print("  proposal {\"proposal\": \"Move study hall to mornings\"}")
        print("  report {\"week\": 42, \"completed\": 5}")
        print("  status | exit")
        print()


def create_agent(agent_name: str, config_path: Optional[str] = None, model: Optional[str] = None) -> AIAgentBase:
    """Resolve the credential, load settings and build the named agent"""
    agent_class = AGENT_CLASSES[agent_name]
    config = load_agent_config(
        agent_name,
        api_key=resolve_api_key(),
        config_path=config_path,
        model=model,
    )
    return agent_class(config)


def create_argument_parser():
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="AI Agent CLI Interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m interfaces.cli_interface --agent bureaucracy                       # Interactive mode
  python -m interfaces.cli_interface --agent bureaucracy query '{"topic": "homework-status"}'
  python -m interfaces.cli_interface --agent family --status
        """
    )

    parser.add_argument("kind", nargs="?", choices=KIND_NAMES, help="Message kind for single-command mode")
    parser.add_argument("payload", nargs="?", default="", help="JSON or text payload")
    parser.add_argument("-a", "--agent", choices=sorted(AGENT_CLASSES), default="bureaucracy", help="Agent to talk to")
    parser.add_argument("-c", "--config", help="Path to an agents YAML file")
    parser.add_argument("-m", "--model", help="Override the configured model")
    parser.add_argument("-s", "--status", action="store_true", help="Print agent status and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output with detailed logs")

    return parser


async def main():
    """Main CLI entry point"""
    logging.basicConfig(
        level=logging.WARNING,
        format='%(levelname)s: %(message)s'
    )

    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        agent = create_agent(args.agent, config_path=args.config, model=args.model)
    except AgentError as e:
        print(f"❌ {e}")
        sys.exit(1)

    cli = CLIInterface(agent, verbose=args.verbose)

    if args.status:
        cli._print_status()
    elif args.kind:
        await cli.single_command_mode(args.kind, parse_payload(args.payload))
    else:
        await cli.interactive_mode()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")


if __name__ == "__main__":
    run()
