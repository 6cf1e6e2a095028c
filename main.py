import sys
import threading
import time
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from models.errors import ResearchError
from research.contracts import Collection
from research.factory import create_workspace_factory
from research.workspace import ResearchWorkspace
from utils.token_tracker import TokenTracker

T = TypeVar("T")

HELP_TEXT = """
=== Available Commands ===
search <query>         - Refine the query and search the web
list                   - Show results, documents and sources with their selection
toggle <n>             - Select/deselect result number n
all / none             - Select or deselect every result
doc <path>             - Attach a local file as a user document
source <url> [title]   - Add a source URL
rm-doc <id>            - Remove a user document
rm-source <id>         - Remove a user source
report                 - Generate a report from the selected items
export [pdf|txt]       - Save the last report (default: pdf)
stats                  - Show token usage statistics
help                   - Show this help message
exit/quit              - Exit the program
"""


def show_loading_animation(stop_event: threading.Event, label: str) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
        label: Text shown next to the spinner
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93m{label} {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * (len(label) + 4) + '\r')
    sys.stdout.flush()


def run_with_spinner(label: str, func: Callable[[], T]) -> T:
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation, label))
    loading_thread.daemon = True
    loading_thread.start()
    try:
        return func()
    finally:
        # Ensure loading is stopped even if there's an error
        stop_animation.set()
        loading_thread.join()


def print_workspace(workspace: ResearchWorkspace) -> None:
    session = workspace.session
    if session:
        print(f"\nQuery: {session.original_query}")
        print(f"Refined: {session.refined_query}")
        print(f"Results ({session.total_result_count}):")
    else:
        print("\nNo search yet.")

    for index, entry in enumerate(workspace.store.entries(Collection.RESULTS), start=1):
        mark = "x" if entry.included else " "
        item = entry.payload
        print(f"  [{mark}] {index}. {item.title}")
        print(f"        {item.url}")

    documents = workspace.store.entries(Collection.DOCUMENTS)
    if documents:
        print("Documents:")
        for entry in documents:
            mark = "x" if entry.included else " "
            print(f"  [{mark}] {entry.id}  {entry.payload.filename} ({entry.payload.size_label})")

    sources = workspace.store.entries(Collection.SOURCES)
    if sources:
        print("Sources:")
        for entry in sources:
            mark = "x" if entry.included else " "
            print(f"  [{mark}] {entry.id}  {entry.payload.title} <{entry.payload.url}>")

    print(f"Selected: {workspace.store.total_selected()}\n")


def handle_command(workspace: ResearchWorkspace, command: str, argument: str) -> None:
    store = workspace.store

    if command == 'search':
        if not argument:
            print("Usage: search <query>")
            return
        run_with_spinner("Searching", lambda: workspace.run_search(argument))
        print_workspace(workspace)

    elif command == 'list':
        print_workspace(workspace)

    elif command == 'toggle':
        if not argument.isdigit():
            print("Usage: toggle <n>")
            return
        results = store.entries(Collection.RESULTS)
        position = int(argument) - 1
        if not 0 <= position < len(results):
            print(f"No result number {argument}")
            return
        entry = store.toggle(Collection.RESULTS, position, not results[position].included)
        print(f"Result {argument} {'selected' if entry.included else 'deselected'}")

    elif command in ('all', 'none'):
        store.select_all(Collection.RESULTS, command == 'all')
        print(f"Selected: {store.total_selected()}")

    elif command == 'doc':
        path = Path(argument).expanduser()
        if not path.is_file():
            print(f"File not found: {argument}")
            return
        entry = store.add_document(path.name, path.stat().st_size, file_handle=path)
        print(f"Added document {entry.id}: {entry.payload.filename} ({entry.payload.size_label})")

    elif command == 'source':
        url, _, title = argument.partition(' ')
        entry = store.add_source(url, title)
        print(f"Added source {entry.id}: {entry.payload.title}")

    elif command in ('rm-doc', 'rm-source'):
        collection = Collection.DOCUMENTS if command == 'rm-doc' else Collection.SOURCES
        store.remove(collection, argument)
        print(f"Removed {argument}")

    elif command == 'report':
        report = run_with_spinner("Writing report", workspace.generate_report)
        if report:
            print(f"\n{report.text}\n")

    elif command == 'export':
        artifact = workspace.export_report(argument or 'pdf')
        Path(artifact.filename).write_bytes(artifact.content)
        print(f"Saved {artifact.filename}")

    else:
        print(f"Unknown command '{command}'. Type 'help' for commands.")


def main():
    config = Config()
    for problem in config.validate():
        print(f"Warning: {problem}")

    # Initialize token tracker
    token_tracker = TokenTracker()

    try:
        workspace = create_workspace_factory(config, on_result=token_tracker.record)()
    except ValueError as e:
        print(f"Error initializing client: {e!s}")
        return

    print(f"\n=== {config.PRODUCT_NAME} ===")
    print(f"Model: {config.get_model_info()}")
    print("Type 'help' for commands, 'exit' to quit\n")

    try:
        while True:
            try:
                user_input = input("> ").strip()
                if not user_input:
                    continue

                command, _, argument = user_input.partition(' ')
                command = command.lower()
                argument = argument.strip()

                if command in ('exit', 'quit'):
                    print("\nGoodbye!")
                    break

                if command == 'help':
                    print(HELP_TEXT)
                    continue

                if command == 'stats':
                    print("\n=== Token Usage ===")
                    print(token_tracker.format_summary())
                    print(f"Last updated: {token_tracker.get_summary()['timestamp']}\n")
                    continue

                handle_command(workspace, command, argument)

            except KeyboardInterrupt:
                print("\nExiting...")
                break
            except (ResearchError, ValueError, KeyError, IndexError) as e:
                print(f"\nError: {str(e)}")
                continue
    finally:
        # Print final token usage if any requests were made
        if token_tracker.requests > 0:
            print("\n=== Final Token Usage ===")
            print(token_tracker.format_summary())


if __name__ == "__main__":
    main()
