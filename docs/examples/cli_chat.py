import asyncio
import os
import sys

from openai import AsyncOpenAI

from script_tools_lib import OpenAIAdapter, setup_logging


async def main() -> None:
    """
    Chat with an OpenAI model that can run the tools of a local folder or a remote registry.

    Usage: python cli_chat.py <tools-folder | apik_...>
    """
    print("Welcome to the CLI Chat (OpenAI + script tools)!")

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        print("Error: OPENAI_API_KEY not found in environment variables.")
        return

    locator = sys.argv[1] if len(sys.argv) > 1 else os.getenv("TOOLS_SOURCE", "./tools")
    setup_logging()

    adapter = OpenAIAdapter(locator, verbose=True)
    adapter.set_environment_variables({"OPENAI_API_KEY": api_key})

    client = AsyncOpenAI(api_key=api_key)
    chatbot = await adapter.create_openai_chatbot(
        client,
        {"model": "gpt-4o", "system": "You are a helpful assistant. Use the tools when they help."},
    )
    print(f"Loaded {len(await adapter.get_tools_by_names())} tools.")

    print("\nStart chatting! Type 'exit' or 'quit' to stop, 'reset' to clear the history.")
    while True:
        user_input = input("\nYou: ").strip()
        if user_input.lower() in ["exit", "quit"]:
            print("Goodbye!")
            break

        if user_input.lower() == "reset":
            chatbot.reset_conversation()
            continue

        if not user_input:
            continue

        result = await chatbot.invoke(user_input)
        print(f"Assistant: {result.text}")


if __name__ == "__main__":
    asyncio.run(main())
