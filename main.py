import logging
import sys

from query_engine import QueryEngine, QueryEngineError
from results import rows_to_json, summarize_rows

USAGE = 'Usage: python main.py [--verbose] [<database> ["<query>"]]'


def configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(engine, sql):
    """Execute one query and print its JSON result; False on error."""
    try:
        rows = engine.execute(sql)
    except QueryEngineError as e:
        print(f"Query Error: {e}")
        return False
    print(rows_to_json(rows))
    print(summarize_rows(len(rows)))
    return True


def repl(engine):
    print(f"Query Tester: {engine.name} (Type 'exit' to quit)")
    while True:
        try:
            line = input(">>> ")
        except EOFError:
            break
        if line.strip().lower() == 'exit':
            break
        if line.strip():
            run(engine, line)


def launch_ide():
    from ide import QueryTesterIDE

    app = QueryTesterIDE()
    app.start()


def main(argv):
    verbose = '--verbose' in argv
    args = [a for a in argv if a != '--verbose']
    configure_logging(verbose)

    if not args:
        launch_ide()
        return 0
    if args[0] in ('-h', '--help') or len(args) > 2:
        print(USAGE)
        return 0 if args[0] in ('-h', '--help') else 2

    with QueryEngine() as engine:
        try:
            engine.open(args[0])
        except QueryEngineError as e:
            print(f"Database Error: {e}")
            return 1
        if len(args) == 2:
            return 0 if run(engine, args[1]) else 1
        repl(engine)
    return 0


def cli():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
