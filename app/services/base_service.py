from typing import Type, TypeVar, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseService:
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def create(self, db: Session, obj_in) -> ModelType:
        """
        Create a new record in the database

        Args:
            db: Database session
            obj_in: Either a SQLAlchemy model or a Pydantic schema

        Returns:
            The created model instance
        """
        if isinstance(obj_in, BaseModel):
            db_obj = self.model(**obj_in.model_dump())
        else:
            db_obj = obj_in

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()
