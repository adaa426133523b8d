from pydantic import BaseModel


class SessionCreate(BaseModel):
    id_token: str


class SessionOut(BaseModel):
    status: str
    uid: str
    role: str
