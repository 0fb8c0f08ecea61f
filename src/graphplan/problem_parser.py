"""
Problem Definition Parser

Parses the textual problem format into starting facts, goals and actions:

    INIT: x_at_a
    GOAL: x_at_b
    ACTION: move_a_to_b
        PRECONDITIONS: x_at_a
        EFFECTS: x_at_b !x_at_a

Grammar:
    problem   := section*
    section   := 'INIT' ':' proplist | 'GOAL' ':' proplist | action
    action    := 'ACTION' ':' STRING 'PRECONDITIONS' ':' proplist 'EFFECTS' ':' proplist
    proplist  := prop*
    prop      := '!'? STRING

`PRE` is accepted as a short form of `PRECONDITIONS`. Identifiers start with
a letter and continue with letters, digits or underscores. `#` starts a
comment that runs to the end of the line.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from graphplan.graphplan_planner import Graphplan
from graphplan.problem import Action, Proposition


class TokenType(Enum):
    """Token types of the problem format"""
    INIT = "INIT"
    GOAL = "GOAL"
    ACTION = "ACTION"
    PRECONDITIONS = "PRECONDITIONS"
    EFFECTS = "EFFECTS"
    COLON = ":"
    EXCLAMATION = "!"
    STRING = "STRING"
    END_STREAM = "END_STREAM"
    INVALID = "INVALID"


KEYWORDS = {
    "INIT": TokenType.INIT,
    "GOAL": TokenType.GOAL,
    "ACTION": TokenType.ACTION,
    "PRECONDITIONS": TokenType.PRECONDITIONS,
    "PRE": TokenType.PRECONDITIONS,
    "EFFECTS": TokenType.EFFECTS,
}


@dataclass(frozen=True)
class Token:
    """
    A lexical token with its source position

    Attributes:
        type: Token type
        text: Source text of the token
        line: 1-based line number
        column: 1-based column of the first character
    """
    type: TokenType
    text: str
    line: int
    column: int


class ProblemParseError(ValueError):
    """Raised when the problem text does not match the grammar"""

    def __init__(self, token: Token, expected: str):
        self.line = token.line
        self.column = token.column
        self.expected = expected
        self.found = token.text if token.type != TokenType.END_STREAM else "end of input"
        super().__init__(
            f"{self.line}:{self.column} found {token.type.value} '{self.found}' but expected {expected}"
        )


@dataclass
class ParsedProblem:
    """Problem definition read from text, not yet handed to a planner"""
    starting: List[Proposition] = field(default_factory=list)
    goals: List[Proposition] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)

    def to_planner(self, **planner_kwargs) -> Graphplan:
        """Create a Graphplan engine populated with this problem"""
        planner = Graphplan(**planner_kwargs)
        for prop in self.starting:
            planner.add_starting(prop)
        for prop in self.goals:
            planner.add_goal(prop)
        for action in self.actions:
            planner.add_action(action)
        return planner


class ProblemTokenizer:
    """
    Splits problem text into tokens, tracking line and column

    Example:
        "INIT: !a" → [INIT, COLON, EXCLAMATION, STRING(a), END_STREAM]
    """

    def __init__(self, text: str):
        self.text = text

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        pos = 0
        line = 1
        column = 1
        length = len(self.text)

        while pos < length:
            char = self.text[pos]

            if char == '\n':
                pos += 1
                line += 1
                column = 1
                continue
            if char.isspace():
                pos += 1
                column += 1
                continue
            if char == '#':
                while pos < length and self.text[pos] != '\n':
                    pos += 1
                continue

            if char == ':':
                tokens.append(Token(TokenType.COLON, char, line, column))
                pos += 1
                column += 1
            elif char == '!':
                tokens.append(Token(TokenType.EXCLAMATION, char, line, column))
                pos += 1
                column += 1
            elif char.isalpha():
                start = pos
                while pos < length and (self.text[pos].isalnum() or self.text[pos] == '_'):
                    pos += 1
                word = self.text[start:pos]
                tokens.append(Token(KEYWORDS.get(word, TokenType.STRING), word, line, column))
                column += pos - start
            else:
                tokens.append(Token(TokenType.INVALID, char, line, column))
                pos += 1
                column += 1

        tokens.append(Token(TokenType.END_STREAM, "", line, column))
        return tokens


class ProblemParser:
    """
    Recursive-descent parser for the problem format

    Parsing either succeeds completely or raises ProblemParseError; a partial
    problem is never returned.
    """

    def __init__(self):
        self.tokens: List[Token] = []
        self.pos = 0

    def parse(self, text: str) -> ParsedProblem:
        """
        Parse a complete problem definition

        Args:
            text: Problem source text

        Returns:
            ParsedProblem with starting facts, goals and actions

        Raises:
            ProblemParseError: On the first token that does not fit the grammar
        """
        self.tokens = ProblemTokenizer(text).tokenize()
        self.pos = 0
        problem = ParsedProblem()

        while self._peek().type != TokenType.END_STREAM:
            token = self._peek()
            if token.type == TokenType.INIT:
                problem.starting.extend(self._parse_section(TokenType.INIT))
            elif token.type == TokenType.GOAL:
                problem.goals.extend(self._parse_section(TokenType.GOAL))
            elif token.type == TokenType.ACTION:
                problem.actions.append(self._parse_action())
            else:
                raise ProblemParseError(token, "INIT, GOAL, or ACTION")

        return problem

    def _parse_section(self, keyword: TokenType) -> List[Proposition]:
        """section := KEYWORD ':' proplist"""
        self._expect(keyword)
        self._expect(TokenType.COLON)
        return self._parse_proplist()

    def _parse_action(self) -> Action:
        """action := 'ACTION' ':' STRING 'PRECONDITIONS' ':' proplist 'EFFECTS' ':' proplist"""
        self._expect(TokenType.ACTION)
        self._expect(TokenType.COLON)
        name = self._expect(TokenType.STRING).text
        preconditions = self._parse_section(TokenType.PRECONDITIONS)
        effects = self._parse_section(TokenType.EFFECTS)
        return Action(name, preconditions, effects)

    def _parse_proplist(self) -> List[Proposition]:
        """proplist := prop*"""
        props: List[Proposition] = []
        while self._peek().type in (TokenType.EXCLAMATION, TokenType.STRING):
            props.append(self._parse_proposition())
        return props

    def _parse_proposition(self) -> Proposition:
        """prop := '!'? STRING"""
        negated = False
        if self._peek().type == TokenType.EXCLAMATION:
            self._advance()
            negated = True
        name = self._expect(TokenType.STRING).text
        return Proposition(name, negated)

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.END_STREAM:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise ProblemParseError(token, token_type.value)
        return self._advance()


def parse_problem_string(text: str, **planner_kwargs) -> Graphplan:
    """
    Parse problem text into a populated planner

    Args:
        text: Problem source text
        **planner_kwargs: Passed to Graphplan (memoize, verbose, logger)

    Returns:
        Graphplan ready for plan()
    """
    return ProblemParser().parse(text).to_planner(**planner_kwargs)


def parse_problem_file(file_path: str, **planner_kwargs) -> Graphplan:
    """
    Parse a problem file into a populated planner

    Args:
        file_path: Path to the problem definition
        **planner_kwargs: Passed to Graphplan

    Returns:
        Graphplan ready for plan()
    """
    text = Path(file_path).read_text(encoding="utf-8")
    return parse_problem_string(text, **planner_kwargs)
