# -*- coding: utf-8 -*-
"""
Command-line front end.

    markovtext build <prefix_len> <output_model> <input>...
    markovtext generate <model> <word_count> [--seed SEED]
"""
import sys
import argparse
import markovtext

EXIT_USAGE = 2
EXIT_NO_INPUT = 3
EXIT_NO_OUTPUT = 4


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            "%r is not an integer" % value) from None
    if number <= 0:
        raise argparse.ArgumentTypeError("%d is not positive" % number)
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="markovtext",
        description="Build a word-level Markov chain from text files and "
                    "generate random text from it.")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    build_cmd = subparsers.add_parser(
        "build", aliases=["read"],
        help="Build a model from text files and save it.")
    build_cmd.add_argument("prefix_len", type=positive_int,
                           help="Number of words in a prefix.")
    build_cmd.add_argument("output", help="Model file to write.")
    build_cmd.add_argument("inputs", nargs="+", metavar="input",
                           help="Text files to learn from.")
    build_cmd.set_defaults(handler=run_build)

    generate_cmd = subparsers.add_parser(
        "generate", help="Generate text from a saved model.")
    generate_cmd.add_argument("model", help="Model file to read.")
    generate_cmd.add_argument("word_count", type=positive_int,
                              help="Maximum number of words to emit.")
    generate_cmd.add_argument("--seed", type=int, default=None,
                              help="Seed for the random generator.")
    generate_cmd.set_defaults(handler=run_generate)
    return parser


def run_build(args):
    builder = markovtext.ModelBuilder(args.prefix_len, verbose=True)
    try:
        chain = builder.build(args.inputs)
    except markovtext.InputFileError as err:
        fail(err, EXIT_NO_INPUT)
    try:
        markovtext.save_chain(chain, args.output)
    except markovtext.OutputFileError as err:
        fail(err, EXIT_NO_OUTPUT)
    print("Model saved to", args.output, file=sys.stderr)


def run_generate(args):
    try:
        chain = markovtext.load_chain(args.model)
    except markovtext.MarkovTextError as err:
        fail(err, EXIT_NO_INPUT)
    generator = markovtext.TextGenerator(chain, seed=args.seed)
    print(generator.generate(args.word_count))


def fail(err, status):
    print("Error:", err, file=sys.stderr)
    sys.exit(status)


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.handler(args)


if __name__ == "__main__":
    main()
