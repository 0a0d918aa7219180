from pydantic import BaseModel
from typing import Optional, Union


class Judge0SubmissionRequest(BaseModel):
    # source_code and stdin travel base64 encoded (base64_encoded=true)
    source_code: str
    language_id: int
    stdin: str = ""


class Judge0SubmissionResponse(BaseModel):
    token: str


class Judge0ExecutionResult(BaseModel):
    """Raw submission payload as returned by Judge0 (text fields still base64)."""
    token: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[Union[str, float]] = None
    memory: Optional[int] = None
    status: dict


class ExecutionResult(BaseModel):
    """Terminal, decoded result of one execution job."""
    token: str
    stdout: str = ""
    stderr: str = ""
    compile_output: str = ""
    time: Optional[Union[str, float]] = None
    status_id: int
    status_description: str


class LanguageInfo(BaseModel):
    id: int
    name: str
    key: str
