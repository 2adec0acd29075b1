import uuid
from typing import Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlmodel import Session, SQLModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with default methods to Create and Delete.

        **Parameters**

        * `model`: A SQLModel model class
        """
        self.model = model

    def create(self, session: Session, *, obj_in: CreateSchemaType) -> ModelType:
        db_obj = self.model(**obj_in.model_dump())
        session.add(db_obj)
        session.commit()
        session.refresh(db_obj)
        return db_obj

    def remove(self, session: Session, *, id: uuid.UUID) -> Optional[ModelType]:
        obj = session.get(self.model, id)
        if obj is not None:
            session.delete(obj)
            session.commit()
        return obj
