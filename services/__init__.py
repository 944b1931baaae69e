from .narrative import NarrativeClient, build_prompt
