"""LLM prompts for Server Survival configuration generation.

All prompts use clear template variable naming with curly braces: {variable_name}.
The numeric ranges quoted here mirror parameters.py; the validator clamps
anything the model gets wrong, but the prompt should not invite it.
"""

import json

from serversurvival.parameters import BASELINE_TRAFFIC_DISTRIBUTION

# =============================================================================
# CONFIGURATION GENERATION PROMPTS
# =============================================================================

CONFIG_OUTPUT_SCHEMA = """{
  "randomEvents": [
    {
      "type": "COST_SPIKE",
      "name": "string",
      "duration": "number between 10 and 30",
      "multiplier": "number between 2 and 10",
      "description": "string"
    },
    {
      "type": "CAPACITY_DROP",
      "name": "string",
      "duration": "number between 10 and 30",
      "multiplier": "number between 0 and 1",
      "description": "string"
    },
    {
      "type": "TRAFFIC_BURST",
      "name": "string",
      "duration": "number between 10 and 30",
      "rpsMultiplier": "number between 2 and 10",
      "description": "string"
    },
    {
      "type": "SERVICE_OUTAGE",
      "name": "string",
      "duration": "number between 10 and 30",
      "description": "string"
    }
  ],
  "trafficPatterns": [
    {
      "name": "string",
      "distribution": {
        "STATIC": "number 0-1",
        "READ": "number 0-1",
        "WRITE": "number 0-1",
        "UPLOAD": "number 0-1",
        "SEARCH": "number 0-1",
        "MALICIOUS": "number 0-1"
      }
    }
  ]
}"""

CONFIG_GENERATION_SYSTEM_PROMPT_TEMPLATE = """You are a professional scenario generator for a tower defense game.

In the game the player builds a system that must fend off malicious requests and absorb an ever-increasing load of internet traffic. The player has firewalls, load balancers and several kinds of storage to route the incoming requests.

Your job is to generate the special events and traffic shifts that fire at random as the game progresses, so that every run feels fresh and replayable:
- Traffic shifts replace the distribution of request types hitting the system. A normal distribution already exists; shifts should challenge the player.
- Random events are incidents the player has to respond to.

You will receive a theme and a difficulty. Keep every event and shift on theme and scale it to the difficulty.

The normal traffic distribution is: {baseline_distribution}. Take it into account when designing shifts.

Guidance:
1. STATIC and MALICIOUS requests are the easiest to handle, READ and SEARCH are harder, WRITE and UPLOAD are the hardest. Handling too much of any single type is also hard.
2. Scale with difficulty and use the full range at higher difficulties.
3. Multipliers should swing widely: 1-3x is low difficulty, 4-6x is medium, 6-10x is hard.
4. Generate at least one event of every type and at least 4 different traffic shifts. More is preferred.
5. Keep event descriptions short and mention the values involved.

Always follow this output schema and reply with the JSON object only, no prose and no Markdown:
{output_schema}

With that said, let's generate our configuration!"""

CONFIG_GENERATION_USER_PROMPT_TEMPLATE = "Theme: {theme} Difficulty: {difficulty}"


def format_config_system_prompt() -> str:
    """Format the system prompt with the baseline mix and output schema."""
    return CONFIG_GENERATION_SYSTEM_PROMPT_TEMPLATE.format(
        baseline_distribution=json.dumps(BASELINE_TRAFFIC_DISTRIBUTION),
        output_schema=CONFIG_OUTPUT_SCHEMA,
    )


def format_config_user_prompt(theme: str, difficulty: str) -> str:
    """Format the user prompt. Theme and difficulty are passed verbatim."""
    return CONFIG_GENERATION_USER_PROMPT_TEMPLATE.format(
        theme=theme,
        difficulty=difficulty,
    )
