from sqlalchemy import Column, Integer, String

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    contact = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default="user")  # user | admin
