"""Prompt templates for quiz generation."""

from __future__ import annotations

from dataclasses import dataclass

MIN_QUIZ_MOMENTS = 8
MAX_QUIZ_MOMENTS = 10


@dataclass(frozen=True)
class GameRequest:
    """Identifies one game to generate content for."""

    game_id: str
    team: str
    year: int
    league: str | None = None

    @property
    def title(self) -> str:
        return f"{self.team} {self.year} - {self.game_id}"


def build_narrative_prompt(request: GameRequest) -> str:
    league = f" ({request.league})" if request.league else ""
    return (
        f"Write a factual play-by-play narrative of the {request.year} {request.team}{league} game "
        f"identified as '{request.game_id}'.\n\n"
        "Cover the game from kickoff to the final whistle in chronological order. "
        "Name the players involved in each key play, the play type, the result and the score "
        "after each scoring play. Use plain prose, one play per line. Do not speculate; "
        "if you are unsure of a detail, leave it out."
    )


def build_quiz_prompt(request: GameRequest, narrative: str) -> str:
    return f"""Using the play-by-play narrative below, write a trivia quiz about the game "{request.title}".

Return a single JSON object with exactly two keys:
- "eventData": an object with a short "summary" string and, when known, "finalScore" and "date".
- "moments": an array of {MIN_QUIZ_MOMENTS} to {MAX_QUIZ_MOMENTS} moments in chronological order.

Moment rules:
1. The FIRST moment has "type": "start" and a "context" string setting the scene.
2. The LAST moment has "type": "end" and a "context" string describing the outcome.
3. Every moment between them has "type": "multipleChoice" with:
   - "context": one or two sentences describing the situation before the play,
   - "question": a question about what happened next,
   - "options": exactly 4 distinct answer strings,
   - "correctOptionIndex": the 0-based index of the correct option,
   - "explanation": one sentence explaining the answer,
   - "importance": a number from 0.0 to 10.0 for how much the moment decided the game.
4. "index" numbers are sequential starting at 0, in the order the moments happened.

Example moment:
{{"index": 1, "type": "multipleChoice", "context": "Rutgers faced 1st and 10 near midfield.",
  "question": "Who caught the pass that set up 1st and goal?",
  "options": ["Tiquan Underwood", "Ray Rice", "Kenny Britt", "Brian Leonard"],
  "correctOptionIndex": 0, "explanation": "Underwood caught a 28-yard pass.", "importance": 9.2}}

Play-by-play narrative:
{narrative}
"""
