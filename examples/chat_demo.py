"""Minimal terminal front-end for the chat session."""

import asyncio

from chat_core.api.service import get_default_session, get_quick_replies


async def main() -> None:
    session = get_default_session()
    print("Quick replies:", " | ".join(get_quick_replies()))
    print("Commands: /clear, /dark, /theme <name>, /quit")
    for msg in session.current_messages():
        print(f"{msg.role}: {msg.text}")

    while True:
        text = input("> ")
        if text == "/quit":
            break
        if text == "/clear":
            answer = input("Clear the conversation? [y/N] ")
            session.clear(answer.strip().lower() == "y")
            continue
        if text == "/dark":
            print("dark mode:", session.toggle_dark_mode())
            continue
        if text.startswith("/theme"):
            print("theme:", session.set_theme(text[len("/theme"):].strip()))
            continue

        task = session.send(text)
        if task is None:
            continue
        print("...")
        reply = await task
        print(f"bot: {reply.text}")


if __name__ == "__main__":
    asyncio.run(main())
