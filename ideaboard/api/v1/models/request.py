from datetime import datetime
from pydantic import BaseModel, BeforeValidator, Field
from typing import Annotated, List, Optional, Any

# Define a validator function to convert any text value to string
def ensure_string(v: Any) -> str:
    if v is None:
        return ""
    return str(v)

class IdeaInput(BaseModel):
    id: Optional[int | str] = None
    text: Annotated[str, BeforeValidator(ensure_string)]
    author: Optional[str] = None
    created_at: Optional[datetime] = None

class AnalysisOptions(BaseModel):
    novelty_details: bool = False
    similarity_matrix: bool = False

class AnalyzeRequest(BaseModel):
    problem_statement: Annotated[str, BeforeValidator(ensure_string)] = ""
    ideas: List[IdeaInput]
    options: Optional[AnalysisOptions] = None

class SubmitIdeaRequest(BaseModel):
    problem_statement: Annotated[str, BeforeValidator(ensure_string)] = ""
    ideas: List[IdeaInput] = Field(default_factory=list)
    text: Annotated[str, BeforeValidator(ensure_string)]
    author: Optional[str] = None
