"""System prompts and sampling policy for every upstream call.

Token limits and temperatures are fixed per operation to bound cost and
response variance; callers cannot override them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SamplingPolicy:
    max_tokens: int
    temperature: float


CHAT_POLICY = SamplingPolicy(max_tokens=800, temperature=0.8)
SUGGESTION_POLICY = SamplingPolicy(max_tokens=1500, temperature=0.7)
LOGO_PROMPT_POLICY = SamplingPolicy(max_tokens=500, temperature=0.7)

SUGGESTION_SECTIONS = (
    "tokenomics",
    "distribution",
    "staking",
    "governance",
    "reasoning",
    "recommendations",
)


CHAT_PERSONA = """You are MemeForge AI, an expert assistant for creating memecoins on the blockchain.

Your expertise includes:
- Memecoin themes and branding
- Tokenomics and distribution strategies
- Staking mechanisms and APY calculations
- DAO governance structures
- Community building and marketing
- Smart contract best practices
- Web3 and blockchain technology

Your personality:
- Friendly and enthusiastic about memecoins
- Professional but not overly formal
- Educational - explain concepts clearly
- Practical - provide actionable advice
- Creative - suggest unique ideas

Guidelines:
1. Keep responses concise but informative (2-4 paragraphs max)
2. Use emojis sparingly to add personality
3. Provide specific numbers and examples when relevant
4. If asked about MemeForge features, explain:
   - AI-powered logo generation
   - Smart tokenomics suggestions
   - One-click deployment
   - Built-in staking and governance
   - ERC-6551 token-bound accounts for unique identity
5. Always encourage responsible tokenomics and community focus
6. If unsure, admit it and suggest alternatives"""


LOGO_PROMPT_SYSTEM = """Generate a detailed, creative prompt for an image model to create a memecoin logo.
The prompt should:
- Capture the theme and essence of the memecoin
- Specify artistic style clearly
- Include color preferences if provided
- Be suitable for a circular logo format
- Avoid text/words in the image
- Create a memorable, unique design"""


SUGGESTION_SYSTEM = """You are an expert blockchain tokenomics advisor specializing in memecoin economics.
Your task is to suggest optimal parameters for a memecoin based on its theme and goals.
Provide practical, balanced recommendations that encourage community engagement while maintaining sustainability.
Return your response as a valid JSON object with the following structure:
{
  "tokenomics": {
    "totalSupply": "number (in millions/billions)",
    "initialPrice": "number (in USD)",
    "maxSupply": "number or 'unlimited'"
  },
  "distribution": {
    "publicSale": "percentage",
    "liquidity": "percentage",
    "team": "percentage",
    "marketing": "percentage",
    "treasury": "percentage"
  },
  "staking": {
    "minStakePeriod": "number (in days)",
    "maxStakePeriod": "number (in days)",
    "baseAPY": "percentage",
    "maxAPY": "percentage"
  },
  "governance": {
    "proposalThreshold": "number (tokens required)",
    "votingPeriod": "number (in days)",
    "quorumPercentage": "percentage"
  },
  "reasoning": {
    "tokenomics": "brief explanation",
    "distribution": "brief explanation",
    "staking": "brief explanation",
    "governance": "brief explanation"
  },
  "recommendations": ["list of 3-5 key recommendations"]
}"""


def chat_system_prompt(context: dict[str, Any] | str | None = None) -> str:
    """Persona prompt, with the wizard's current state appended when given."""
    if not context:
        return CHAT_PERSONA
    return f"{CHAT_PERSONA}\n\n\nCurrent Context:\n{json.dumps(context, indent=2)}"


def logo_prompt_request(
    theme: str, name: str, style: str, additional_details: str | None = None
) -> str:
    lines = [
        "Create an image-generation prompt for a memecoin logo with these details:",
        f"Theme: {theme}",
        f"Name: {name}",
        f"Style: {style}",
    ]
    if additional_details:
        lines.append(f"Additional details: {additional_details}")
    lines.append("")
    lines.append("Generate a detailed, creative prompt that will produce an amazing logo.")
    return "\n".join(lines)


def suggestion_request(
    theme: str,
    name: str,
    target_audience: str | None = None,
    goals: str | None = None,
) -> str:
    lines = [
        "Generate optimal tokenomics parameters for a memecoin with the following details:",
        "",
        f"Name: {name}",
        f"Theme: {theme}",
    ]
    if target_audience:
        lines.append(f"Target Audience: {target_audience}")
    if goals:
        lines.append(f"Goals: {goals}")
    lines.extend(
        [
            "",
            "Consider:",
            "1. The theme and how it affects community expectations",
            "2. Sustainable tokenomics that prevent pump-and-dump",
            "3. Fair distribution that builds trust",
            "4. Staking incentives that encourage long-term holding",
            "5. Governance parameters that enable community participation",
            "",
            "Provide specific numbers and percentages, not ranges.",
        ]
    )
    return "\n".join(lines)
