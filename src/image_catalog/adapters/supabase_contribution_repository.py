"""Supabase-backed contribution repository."""

from dataclasses import dataclass

from supabase import Client

from image_catalog.domain.contributions import ContributionRecord, NewContribution
from image_catalog.services.contributions import ContributionRepository


@dataclass
class SupabaseContributionRepository(ContributionRepository):
    """Supabase implementation for contributed image rows."""

    client: Client

    def insert_contribution(self, contribution: NewContribution) -> ContributionRecord:
        """Insert a contribution with its embedding and return the stored row."""
        response = (
            self.client.table("images")
            .insert(
                {
                    "profile_id": contribution.owner_id,
                    "prompt": contribution.prompt,
                    "image_url": contribution.image_url,
                    "embedding_vector": _to_vector_literal(contribution.embedding),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create contribution in Supabase")
        row = response.data[0]
        return ContributionRecord(
            id=str(row["id"]),
            owner_id=contribution.owner_id,
            prompt=contribution.prompt,
            image_url=contribution.image_url,
            embedding=contribution.embedding,
        )


def _to_vector_literal(embedding: list[float]) -> str:
    """Format an embedding in pgvector's text representation."""
    return "[" + ",".join(repr(float(value)) for value in embedding) + "]"
