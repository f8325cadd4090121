"""
Text-to-speech settings for page narration.
"""

TTS_CONFIG = {
    "model": "gpt-4o-mini-tts",
    "voice": "coral",
    "format": "mp3",
    "max_text_length": 4096,  # Provider limit per request
    "instructions": """Voice Affect: Gentle, nurturing, and caring; like a loving storyteller reading to a child before bedtime.

Tone: Warm, calm, and comforting; evoke a sense of safety and imagination.

Pacing: Slow and steady; allow time between sentences for the child to absorb the story and visualize the scenes.

Emotion: Softly expressive; reflect wonder, curiosity, and kindness in every phrase.

Pronunciation: Clear and smooth articulation, with a light melodic rhythm to engage young listeners.""",
}
