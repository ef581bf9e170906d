"""Pydantic models for workspace coverage and link-length search results."""

from pydantic import BaseModel, Field

from armkin.workspace.coverage import CoverageReport


class CoverageReportMessage(BaseModel):
    """How much of a target cloud one arm reaches."""

    link_lengths: list[float] = Field(description="Link lengths of the arm")
    target_count: int = Field(description="Number of targets in the cloud")
    reachable_count: int = Field(description="Targets with a valid IK solution")
    covers_all: bool = Field(description="Whether every target is reachable")
    unreachable: list[list[float]] = Field(
        default_factory=list, description="Targets without a valid solution"
    )
    reasons: list[str] = Field(
        default_factory=list, description="Failure reason per unreachable target"
    )

    @classmethod
    def from_report(cls, report: CoverageReport) -> "CoverageReportMessage":
        return cls(
            link_lengths=list(report.link_lengths),
            target_count=len(report.targets),
            reachable_count=report.reachable_count,
            covers_all=report.covers_all,
            unreachable=report.unreachable_targets.tolist(),
            reasons=[report.failures[i] for i in sorted(report.failures)],
        )


class LinkSearchResultMessage(BaseModel):
    """Summary of a brute-force link-length search."""

    candidate_count: int = Field(description="Number of link-length sets checked")
    target_count: int = Field(description="Number of targets each set had to reach")
    passing: list[list[float]] = Field(
        default_factory=list, description="Link-length sets that reach every target"
    )

    @classmethod
    def from_reports(
        cls, candidate_count: int, target_count: int, reports: list[CoverageReport]
    ) -> "LinkSearchResultMessage":
        return cls(
            candidate_count=candidate_count,
            target_count=target_count,
            passing=[list(r.link_lengths) for r in reports],
        )
