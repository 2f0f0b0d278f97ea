from fastapi import APIRouter
from pydantic import BaseModel

from mesmtf.services.symptom_intake import IntakeResult, parse_symptom_text

router = APIRouter()


class TextInput(BaseModel):
    text: str


@router.post("/parse-symptoms", response_model=IntakeResult)
async def parse_symptoms(input: TextInput):
    """Parse a free-text symptom description into an evaluation request."""
    return await parse_symptom_text(input.text)
