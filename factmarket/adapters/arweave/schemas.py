from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class TagSchema(BaseModel):
    name: str
    value: str


class TxNodeSchema(BaseModel):
    id: str
    tags: List[TagSchema] = Field(default_factory=list)


class TxEdgeSchema(BaseModel):
    node: TxNodeSchema


class TxConnectionSchema(BaseModel):
    edges: List[TxEdgeSchema] = Field(default_factory=list)


class TxQueryData(BaseModel):
    transaction: Optional[TxNodeSchema] = None
    transactions: Optional[TxConnectionSchema] = None


class GraphQLResponse(BaseModel):
    data: Optional[TxQueryData] = None
    errors: Optional[List[dict]] = None


class RegisterResponse(BaseModel):
    contractTxId: Optional[str] = None
    id: Optional[str] = None
