from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from biblio.domain.entities import CountryAuthors, PublicationsByCountry
from biblio.domain.ports import LibraryPort
from biblio.usecases.error_mapping import map_api_error


@dataclass(frozen=True)
class AuthorStatistics:
    top_country: Optional[CountryAuthors] = None
    publications: PublicationsByCountry = field(default_factory=PublicationsByCountry)


@dataclass
class LoadAuthorStatistics:
    port: LibraryPort

    def __call__(self) -> AuthorStatistics:
        try:
            top = self.port.fetch("/autores/pais-mas-autores").item()
            publications = self.port.fetch("/autores/paises-publicaciones").item()
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
        return AuthorStatistics(
            top_country=None if top is None else CountryAuthors.from_payload(top),
            publications=PublicationsByCountry.from_payload(publications or {}),
        )
