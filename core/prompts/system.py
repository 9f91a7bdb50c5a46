# core/prompts/system.py
"""Prompt templates"""

# Marker the model must emit for any field it cannot determine
NOT_READABLE = "Not clearly readable"

# Prescription transcription prompt. Constant: never parameterized per request.
PRESCRIPTION_PROMPT = (
    "You are a medical assistant AI. Analyze the uploaded doctor's handwritten "
    "prescription image carefully and provide:\n"
    "1. The list of medicines mentioned.\n"
    "2. Dosage for each medicine.\n"
    "3. Purpose of each medicine.\n"
    "4. Where the handwriting is hard to read, give your best-effort corrected "
    "spelling of the medicine name.\n"
    f"5. If a field cannot be determined, write \"{NOT_READABLE}\" for that field.\n"
    "6. Respond in plain text only. Do not use markdown, bullet symbols, asterisks "
    "or any other markup.\n"
    "Repeat the following block for each medicine:\n\n"
    "Medicine Name:\n"
    "Dosage:\n"
    "Purpose:\n"
)


def get_prescription_prompt() -> str:
    """The fixed extraction contract sent with every prescription image"""
    return PRESCRIPTION_PROMPT
