"""CRUD operations for vault vectors using FastCRUD."""

from fastcrud import FastCRUD

from .models import VaultVector

vault_vector_crud: FastCRUD = FastCRUD(VaultVector)
