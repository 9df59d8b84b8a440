import logging
from functools import lru_cache

import tree_sitter_c_sharp
from tree_sitter import Language, Parser, Tree

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def load_language() -> Language:
    return Language(tree_sitter_c_sharp.language())


def new_parser() -> Parser:
    # Parser instances are not shared between threads; the Language is.
    return Parser(load_language())


def parse_source(source: str, parser: Parser = None, path: str = "<string>") -> Tree:
    parser = parser or new_parser()
    tree = parser.parse(source.encode("utf-8"))
    if tree.root_node.has_error:
        logger.debug("Syntax errors in %s; scanning the recovered tree", path)
    return tree
