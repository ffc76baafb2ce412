from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field

class FieldModel(BaseModel):
    # One extraction rule as written in a config file
    name: str
    query: str
    type: Optional[str] = None

class MetricModel(BaseModel):
    # One output record shape
    metric_name: str
    fields: List[FieldModel] = Field(default_factory=list)

class ParserConfigModel(BaseModel):
    # Schema for a parser config file (YAML or JSON)
    schema_version: str = Field(default='0.1.0')
    query_syntax: str = Field(default='key')
    metrics: List[MetricModel] = Field(default_factory=list)
