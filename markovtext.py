# -*- coding: utf-8 -*-
import sys
import random
import collections
import bisect
import re
import numpy


class MarkovTextError(Exception):
    """
    Base class for errors raised while building, storing or loading a chain.
    """


class InputFileError(MarkovTextError):
    pass


class ModelFileError(MarkovTextError):
    pass


class ModelFormatError(MarkovTextError, ValueError):
    pass


class OutputFileError(MarkovTextError):
    pass


class StartOfText(object):
    """
    Class defines the placeholder which fills prefix slots before the first
    word of a text. There is exactly one instance, START.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(StartOfText, cls).__new__(cls)
        return cls._instance

    def __repr__(self):
        return "START"


START = StartOfText()


class WordTokenizer(object):
    """
    Class defines tokenizer, which splits text into whitespace-delimited words.
    """
    def __init__(self, text):
        self.words_ = text.split()

    def __iter__(self):
        return iter(self.words_)

    def __len__(self):
        return len(self.words_)


class Prefix(object):
    """
    Class defines a fixed-length window of preceding words.
    A fresh window holds START in every slot.
    """
    def __init__(self, prefix_len):
        if prefix_len < 1:
            raise ValueError("Prefix length must be positive")
        self.slots_ = [START] * prefix_len

    def shift(self, word):
        del self.slots_[0]
        self.slots_.append(word)

    def key(self):
        return tuple(self.slots_)

    def __len__(self):
        return len(self.slots_)

    def __repr__(self):
        return "Prefix(%r)" % (self.slots_, )


class SuffixDistribution(object):
    """
    Class defines the suffixes observed after one prefix, with their counts,
    and weighted sampling from them. Entries keep first-observation order.
    """
    def __init__(self):
        self.counter_ = collections.Counter()
        self.items_, self.cum_weights_ = None, None

    def add(self, word):
        self.counter_[word] += 1
        self.items_, self.cum_weights_ = None, None

    def add_count(self, word, count):
        """
        Adds count to the word's current count; used when loading a model.
        """
        self.counter_[word] += count
        self.items_, self.cum_weights_ = None, None

    def items(self):
        return list(self.counter_.items())

    def total(self):
        return sum(self.counter_.values())

    def sample(self, rng):
        """
        Draws r uniformly from [0, total) and returns the first word whose
        cumulative count exceeds r.
        """
        if self.items_ is None:
            self.prepare_distribution_()

        if len(self.items_) == 0 or self.cum_weights_[-1] <= 0:
            raise LookupError("No suffixes with positive count")

        r = rng.randrange(int(self.cum_weights_[-1]))
        return self.items_[bisect.bisect_right(self.cum_weights_, r)]

    def __len__(self):
        return len(self.counter_)

    def __contains__(self, word):
        return word in self.counter_

    def prepare_distribution_(self):
        self.items_ = list(self.counter_.keys())
        # object dtype keeps Python ints, so loaded counts never overflow
        weights = numpy.array(list(self.counter_.values()), dtype=object)
        self.cum_weights_ = list(numpy.cumsum(weights, dtype=object))


class Chain(object):
    """
    Class defines Markov chain of a fixed prefix length.
    The structure of the table is the following:
    chain_[(slot_1, ..., slot_N)] = SuffixDistribution
    where every slot is a word or START.
    """
    def __init__(self, prefix_len):
        if prefix_len < 1:
            raise ValueError("Prefix length must be positive")
        self.prefix_len = prefix_len
        self.chain_ = dict()

    def add_text(self, words):
        prefix = Prefix(self.prefix_len)
        for word in words:
            self.distribution_(prefix.key()).add(word)
            prefix.shift(word)

    def suffixes(self, prefix):
        key = prefix.key() if isinstance(prefix, Prefix) else tuple(prefix)
        return self.chain_.get(key)

    def prefix_keys(self):
        return list(self.chain_.keys())

    def as_dict(self):
        return {key: distribution.items()
                for key, distribution in self.chain_.items()}

    def __len__(self):
        return len(self.chain_)

    def distribution_(self, key):
        if key not in self.chain_:
            self.chain_[key] = SuffixDistribution()
        return self.chain_[key]


class ModelBuilder(object):
    """
    Class builds a Chain from text files. Every file is an independent token
    stream: the prefix window restarts from START at the beginning of each.
    """
    def __init__(self, prefix_len, verbose=False):
        self.chain = Chain(prefix_len)
        self.verbose = verbose
        self.words_processed = 0
        self.files_processed = 0

    def build(self, paths):
        for path in paths:
            try:
                with open(path, "r", encoding="utf8") as fin:
                    text = fin.read()
            except (OSError, UnicodeDecodeError) as err:
                raise InputFileError(
                    "couldn't open input file %s: %s" % (path, err)) from err
            self.add_text(text)
            self.files_processed += 1
            if self.verbose:
                print(path, "processed", file=sys.stderr)
                print("Total words processed =", self.words_processed,
                      file=sys.stderr)
                print("Total distinct prefixes =", len(self.chain),
                      file=sys.stderr)
        return self.chain

    def add_text(self, text):
        words = WordTokenizer(text)
        self.chain.add_text(words)
        self.words_processed += len(words)


# Serialization.
#
# Line 1 is the prefix length; every following line is
#   slot_1 ... slot_N suffix_1 count_1 suffix_2 count_2 ...
# START is written as "". Words made only of two or more double quotes get
# one extra leading quote so they never read back as START.

START_MARKER = '""'
_QUOTES_ONLY = re.compile(r'^""+$')
_ESCAPED_QUOTES = re.compile(r'^"""+$')


def encode_slot_(slot):
    if slot is START:
        return START_MARKER
    if _QUOTES_ONLY.match(slot):
        return '"' + slot
    return slot


def decode_slot_(field):
    if field == START_MARKER:
        return START
    return decode_word_(field)


def decode_word_(field):
    if _ESCAPED_QUOTES.match(field):
        return field[1:]
    return field


def parse_count_(field):
    try:
        count = int(field)
    except ValueError:
        return 0
    return max(count, 0)


def write_chain(chain, fout):
    fout.write("%d\n" % chain.prefix_len)
    for key in chain.prefix_keys():
        fields = [encode_slot_(slot) for slot in key]
        for word, count in chain.suffixes(key).items():
            fields.append(encode_slot_(word))
            fields.append(str(count))
        fout.write(" ".join(fields) + "\n")


def read_chain(fin):
    header = fin.readline()
    try:
        prefix_len = int(header)
    except ValueError:
        raise ModelFormatError(
            "line 1: expected prefix length, got %r" % header.strip()) from None
    if prefix_len < 1:
        raise ModelFormatError(
            "line 1: prefix length must be positive, got %d" % prefix_len)

    chain = Chain(prefix_len)
    for line_number, line in enumerate(fin, 2):
        fields = line.split()
        if not fields:
            continue
        if len(fields) < prefix_len:
            raise ModelFormatError(
                "line %d: expected %d prefix words, got %d"
                % (line_number, prefix_len, len(fields)))
        key = tuple(decode_slot_(field) for field in fields[:prefix_len])
        distribution = chain.distribution_(key)
        pairs = fields[prefix_len:]
        for i in range(0, len(pairs), 2):
            count = parse_count_(pairs[i + 1]) if i + 1 < len(pairs) else 0
            distribution.add_count(decode_word_(pairs[i]), count)
    return chain


def save_chain(chain, filename):
    try:
        fout = open(filename, "w", encoding="utf8")
    except OSError as err:
        raise OutputFileError(
            "couldn't create model file %s: %s" % (filename, err)) from err
    with fout:
        write_chain(chain, fout)


def load_chain(filename):
    try:
        fin = open(filename, "r", encoding="utf8")
    except OSError as err:
        raise ModelFileError(
            "couldn't open model file %s: %s" % (filename, err)) from err
    with fin:
        try:
            return read_chain(fin)
        except UnicodeDecodeError as err:
            raise ModelFormatError(
                "model file %s is not valid UTF-8: %s" % (filename, err)) from err


class TextGenerator(object):
    """
    The main class for generating text. Walks the chain from the start-of-text
    prefix, picking every next word with probability proportional to how often
    it followed the current prefix.
    """
    def __init__(self, chain, rng=None, seed=None):
        self.chain = chain
        self.rng = rng if rng is not None else random.Random(seed)

    def generate_words(self, num_words):
        if num_words < 1:
            raise ValueError("Number of words must be positive")

        words = []
        prefix = Prefix(self.chain.prefix_len)
        for _ in range(num_words):
            distribution = self.chain.suffixes(prefix)
            if distribution is None or distribution.total() <= 0:
                break
            word = distribution.sample(self.rng)
            words.append(word)
            prefix.shift(word)
        return words

    def generate(self, num_words):
        return " ".join(self.generate_words(num_words))
