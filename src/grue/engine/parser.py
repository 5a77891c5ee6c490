"""Turn word tokens into a Command, or explain why that isn't possible.

Resolution is a pure function of the tokens, the vocabulary and the
candidate set handed in by the caller, so identical input always parses
identically.
"""

from dataclasses import dataclass
from enum import StrEnum

from .lexer import Token
from .vocabulary import Arity, Role, Slot, Vocabulary
from .world import Obj

GO = "go"

# How a bare verb is echoed back when it needs an object
PROMPT_WORDS = {
    "get": "take",
    "pick": "take",
    "place": "put",
    "insert": "put",
    "kill": "attack",
    "hit": "attack",
    "fight": "attack",
    "blow": "blow out",
}


@dataclass(frozen=True)
class Command:
    verb: str
    direct: str | None = None
    indirect: str | None = None
    preposition: str | None = None
    direction: str | None = None
    direct_text: str = ""
    indirect_text: str = ""
    literal: str = ""


class FailureKind(StrEnum):
    EMPTY_INPUT = "empty_input"
    UNKNOWN_WORD = "unknown_word"
    MISSING_VERB = "missing_verb"
    VERB_NEEDS_OBJECT = "verb_needs_object"
    AMBIGUOUS = "ambiguous"
    NOT_VISIBLE = "not_visible"
    NOT_POSSESSED = "not_possessed"


def ambiguity_message(noun: str, names: list[str] | tuple[str, ...]) -> str:
    """Which X do you mean[, the Y[, the Z][, or the W]]?"""
    alternatives = [f"the {name}" for name in names]
    if not alternatives:
        return f"Which {noun} do you mean?"
    if len(alternatives) == 1:
        listed = alternatives[0]
    elif len(alternatives) == 2:
        listed = f"{alternatives[0]} or {alternatives[1]}"
    else:
        listed = ", ".join(alternatives[:-1]) + f", or {alternatives[-1]}"
    return f"Which {noun} do you mean, {listed}?"


@dataclass(frozen=True)
class ParseFailure:
    kind: FailureKind
    word: str = ""
    candidates: tuple[str, ...] = ()

    def message(self) -> str:
        match self.kind:
            case FailureKind.EMPTY_INPUT:
                return "I beg your pardon?"
            case FailureKind.UNKNOWN_WORD:
                return f'I don\'t know the word "{self.word}".'
            case FailureKind.MISSING_VERB:
                return "There was no verb in that sentence!"
            case FailureKind.VERB_NEEDS_OBJECT:
                return f"What do you want to {self.word}?"
            case FailureKind.AMBIGUOUS:
                return ambiguity_message(self.word, self.candidates)
            case FailureKind.NOT_VISIBLE:
                return f"You can't see any {self.word} here!"
            case FailureKind.NOT_POSSESSED:
                return "You don't have that."


# A clause is a run of (token, expanded word) pairs.
Clause = list[tuple[Token, str]]


def _split(words: Clause, vocabulary: Vocabulary) -> tuple[Clause, str | None, Clause]:
    """Split at the first preposition into direct and indirect clauses."""
    for index, (_, word) in enumerate(words):
        if vocabulary.resolve_role(word, Slot.OBJECT) is Role.PREPOSITION:
            preposition = vocabulary.canonical(word, Role.PREPOSITION)
            return words[:index], preposition, words[index + 1 :]
    return words, None, []


def _matches(obj: Obj, clause: Clause, vocabulary: Vocabulary) -> bool:
    last = len(clause) - 1
    for index, (_, word) in enumerate(clause):
        match vocabulary.resolve_role(word, Slot.OBJECT, last=index == last):
            case Role.NOUN:
                if word not in obj.synonyms:
                    return False
            case Role.ADJECTIVE:
                if word not in obj.adjectives:
                    return False
            case _:
                return False
    return True


def _resolve(
    clause: Clause, vocabulary: Vocabulary, candidates: list[Obj]
) -> str | ParseFailure:
    """Match a noun phrase against the candidate set."""
    head = clause[-1][0].surface
    matches = [obj for obj in candidates if _matches(obj, clause, vocabulary)]
    if not matches:
        return ParseFailure(FailureKind.NOT_VISIBLE, word=head)
    if len(matches) > 1:
        return ParseFailure(
            FailureKind.AMBIGUOUS,
            word=head,
            candidates=tuple(obj.name for obj in matches),
        )
    return matches[0].id


def _phrase(clause: Clause) -> str:
    return " ".join(token.surface for token, _ in clause)


def parse(
    tokens: list[Token], vocabulary: Vocabulary, candidates: list[Obj]
) -> Command | ParseFailure:
    """Parse one sentence.

    The first content word must be a verb, or a direction standing for
    "go". Unknown words anywhere in the sentence are reported before any
    noun phrase is resolved.
    """
    if not tokens:
        return ParseFailure(FailureKind.EMPTY_INPUT)

    words: Clause = []
    for token in tokens:
        word = vocabulary.expand_abbreviation(token.text)
        if vocabulary.roles(word) != {Role.IGNORABLE}:
            words.append((token, word))
    if not words:
        return ParseFailure(FailureKind.MISSING_VERB)

    first_token, first = words[0]
    if not vocabulary.is_known(first):
        return ParseFailure(FailureKind.UNKNOWN_WORD, word=first_token.surface)

    role = vocabulary.resolve_role(first, Slot.COMMAND)
    if role is Role.DIRECTION:
        return Command(verb=GO, direction=vocabulary.canonical(first, Role.DIRECTION))
    if role is not Role.VERB:
        return ParseFailure(FailureKind.MISSING_VERB)

    verb = vocabulary.canonical(first, Role.VERB)
    prompt = PROMPT_WORDS.get(first, first)
    rest = words[1:]
    if rest and (phrasal := vocabulary.phrasal_verb(verb, rest[0][1])):
        prompt = f"{first} {rest[0][1]}"
        verb, rest = phrasal, rest[1:]
    syntax = vocabulary.verb_syntax(verb)

    if syntax.literal:
        literal = " ".join(word for _, word in rest)
        if not literal and syntax.arity is Arity.REQUIRED:
            return ParseFailure(FailureKind.VERB_NEEDS_OBJECT, word=prompt)
        return Command(verb=verb, literal=literal)

    for token, word in rest:
        if not vocabulary.is_known(word):
            return ParseFailure(FailureKind.UNKNOWN_WORD, word=token.surface)

    if syntax.arity is Arity.NONE:
        return Command(verb=verb)

    direction = None
    if syntax.motion and rest:
        word = rest[0][1]
        if vocabulary.resolve_role(word, Slot.MOTION) is Role.DIRECTION:
            direction = vocabulary.canonical(word, Role.DIRECTION)
            rest = rest[1:]

    direct_clause, preposition, indirect_clause = _split(rest, vocabulary)
    if not direct_clause and indirect_clause:
        direct_clause, indirect_clause = indirect_clause, []

    if not direct_clause:
        if syntax.arity is Arity.REQUIRED and direction is None:
            return ParseFailure(FailureKind.VERB_NEEDS_OBJECT, word=prompt)
        return Command(verb=verb, direction=direction, preposition=preposition)

    direct = _resolve(direct_clause, vocabulary, candidates)
    if isinstance(direct, ParseFailure):
        return direct
    indirect = None
    if indirect_clause:
        indirect = _resolve(indirect_clause, vocabulary, candidates)
        if isinstance(indirect, ParseFailure):
            return indirect

    return Command(
        verb=verb,
        direct=direct,
        indirect=indirect,
        preposition=preposition,
        direction=direction,
        direct_text=_phrase(direct_clause),
        indirect_text=_phrase(indirect_clause),
    )
