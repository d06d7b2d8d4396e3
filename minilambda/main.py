"""Runs the minilambda interpreter on a file, or in command-line mode. Also uses the error handling context manager.
Called from the minilambda executable script and from `python -m minilambda`.
"""

import argparse

from minilambda.lang.error import ErrorHandler
from minilambda.lang.session import Session
from minilambda.lang.shell import Shell


def main(argv=None):
    """Runs minilambda interpreter."""
    parser = argparse.ArgumentParser(prog="minilambda")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-v", "--verbose", help="print each function application", action="store_true")
    parser.add_argument("--tree", help="print the syntax tree of each expression", action="store_true")
    args = parser.parse_args(argv)

    with ErrorHandler(verbose=args.verbose) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, tree=args.tree)
            sess.run()

            for expr, value in sess.results:
                print(sess.render(expr, value))

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, tree=args.tree)).cmdloop()
