"""Handles interactive/command-line mode for the minilambda interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """minilambda interpreter shell."""
    intro = "minilambda interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def default(self, line):
        """Evaluates arbitrary minilambda expression."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self.sess.add(line, self.line_num) is None:
                return  # if line is empty (or only a comment), do nothing

            self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the minilambda interpreter!\n\n"
              "Operators are written in prefix form with parenthesized operands: type\n"
              "'+(1, 2)' to add 1 and 2, or 'if <(1, 5) then 8 else 9' to branch. Booleans\n"
              "are 'T' and 'F'.\n\n"
              "Functions take one argument: 'func x => *(x, 2)' doubles its argument, and\n"
              "'apply(func x => *(x, 2), 21)' applies it to 21, giving 42.\n\n"
              "'help' and 'exit' are shell commands, so a bare variable can't be named either.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
