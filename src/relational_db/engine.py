from typing import Optional

from prettytable import HRuleStyle, PrettyTable

from src.decorators import handle_db_errors, log_time
from src.relational_db.interpreter import Interpreter, ResultSet
from src.relational_db.parser import parse_command
from src.relational_db.storage import Catalog
from src.relational_db.utils import DATA_DIR

OK = "[OK]"
EXIT_COMMANDS = {"exit", "quit"}


def render_table(result: ResultSet) -> str:
    """Pipe-delimited, left-aligned table with a rule of '=' under the header."""
    t = PrettyTable()
    t.field_names = result.attributes
    t.align = "l"
    t.hrules = HRuleStyle.HEADER
    t.horizontal_char = "="
    t.junction_char = "="
    for row in result.rows:
        t.add_row(row)
    return t.get_string()


def format_response(result: Optional[ResultSet]) -> str:
    if result is None:
        return OK
    return f"{OK}\n{render_table(result)}"


@handle_db_errors
@log_time
def execute_command(interpreter: Interpreter, line: str) -> str:
    """Run one command string end to end and return the response text."""
    command = parse_command(line)
    return format_response(interpreter.execute(command))


def run(data_dir: str = DATA_DIR) -> None:
    catalog = Catalog(data_dir)
    interpreter = Interpreter(catalog)

    print("Database started. Enter one command per line; exit to quit.")

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not user_input:
                continue
            if user_input.lower() in EXIT_COMMANDS:
                break

            print(execute_command(interpreter, user_input))
    finally:
        catalog.close_database()

    print("Bye.")
