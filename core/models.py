"""
PIVTOOLS Site Content Models

Pydantic v2 models for the description tables rendered by the site:
navigation, footer, home page sections, author bios and the manual index.
Content files under ``content/`` are validated into these models when loaded.

Example usage:
    from core.models import ManualSection

    section = ManualSection(
        title="Masking",
        href="/manual/masking",
        icon="layers",
        subsections=[{"title": "Overview", "href": "/manual/masking#overview"}],
    )
    print(section.slug)  # "masking"
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from core.design import DesignVariant

MANUAL_ROOT = "/manual"


class NavItem(BaseModel):
    """Top navigation entry."""
    name: str = Field(..., min_length=1)
    href: str = Field(..., min_length=1)


class FooterLink(BaseModel):
    name: str
    href: str

    @computed_field
    @property
    def external(self) -> bool:
        """Links leaving the site open in a new tab."""
        return self.href.startswith("http")


class FooterColumn(BaseModel):
    title: str
    icon: Optional[str] = None
    links: List[FooterLink] = Field(default_factory=list)


class DesignOption(BaseModel):
    """Entry in the design picker."""
    id: DesignVariant
    name: str
    description: str


class SiteContent(BaseModel):
    """Site-wide metadata and navigation shell content."""
    name: str
    tagline: str
    description: str
    keywords: List[str] = Field(default_factory=list)
    organisation: str
    organisation_url: str
    repository_url: str
    contact_email: str
    license: str
    navigation: List[NavItem]
    footer_blurb: str
    footer: List[FooterColumn]
    legal_links: List[FooterLink] = Field(default_factory=list)
    designs: List[DesignOption]

    @model_validator(mode='after')
    def validate_designs(self):
        ids = [option.id for option in self.designs]
        if sorted(ids, key=lambda d: d.value) != list(DesignVariant):
            raise ValueError("designs must list every variant exactly once")
        return self


class Stat(BaseModel):
    value: str
    label: str
    sublabel: str = ""


class FeatureCard(BaseModel):
    title: str
    description: str
    icon: Optional[str] = None


class Capability(BaseModel):
    name: str
    desc: str


class CapabilityStage(BaseModel):
    stage: int = Field(..., ge=1)
    title: str
    icon: Optional[str] = None
    capabilities: List[Capability]


class WorkflowMode(BaseModel):
    title: str
    description: str
    icon: Optional[str] = None


class QuickStartStep(BaseModel):
    title: str
    code: str
    description: str


class AuthorLinks(BaseModel):
    email: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None

    def items(self) -> List[tuple]:
        """(kind, href) pairs for the links that are set."""
        pairs = []
        if self.email:
            pairs.append(("email", f"mailto:{self.email}"))
        for kind in ("linkedin", "github", "website"):
            value = getattr(self, kind)
            if value:
                pairs.append((kind, value))
        return pairs


class Author(BaseModel):
    name: str
    role: str
    affiliation: str
    image: Optional[str] = None
    bio: str
    short_bio: Optional[str] = None
    links: AuthorLinks = Field(default_factory=AuthorLinks)

    @computed_field
    @property
    def initials(self) -> str:
        """Initials shown when no portrait is available."""
        words = [w for w in self.name.replace(".", " ").split() if w[:1].isupper()]
        titles = {"Dr", "Prof"}
        return "".join(w[0] for w in words if w not in titles)[:2]


class HeroCopy(BaseModel):
    """Hero text for one design variant."""
    eyebrow: str
    title: str = "PIV"
    highlight: str = "TOOLS"
    tagline: str
    subtagline: str = ""
    primary_cta: NavItem
    secondary_cta: NavItem


class SectionIntro(BaseModel):
    title: str
    highlight: Optional[str] = None
    intro: str = ""


class HomeContent(BaseModel):
    """Everything the four home page designs render."""
    heroes: Dict[DesignVariant, HeroCopy]
    stats: List[Stat]
    why: SectionIntro
    features: List[FeatureCard]
    capabilities_intro: SectionIntro
    capabilities: List[CapabilityStage]
    workflow_intro: SectionIntro
    workflow: List[WorkflowMode]
    workflow_note: str = ""
    quick_start_intro: SectionIntro
    quick_start: List[QuickStartStep]
    research_intro: SectionIntro
    authors: List[Author]
    citation: str
    university_blurb: str

    @field_validator('heroes')
    @classmethod
    def validate_heroes(cls, heroes):
        missing = [v.value for v in DesignVariant if v not in heroes]
        if missing:
            raise ValueError(f"hero copy missing for designs: {', '.join(missing)}")
        return heroes


class ManualSubsection(BaseModel):
    title: str
    href: str = Field(..., pattern=r"^/manual(/[a-z0-9-]+)?#[a-z0-9-]+$")

    @computed_field
    @property
    def anchor(self) -> str:
        return self.href.split("#", 1)[1]

    @property
    def path(self) -> str:
        return self.href.split("#", 1)[0]


class ManualSection(BaseModel):
    """Manual index entry, optionally with in-page subsections."""
    title: str
    href: str = Field(..., pattern=r"^/manual(/[a-z0-9-]+)?$")
    icon: Optional[str] = None
    subsections: List[ManualSubsection] = Field(default_factory=list)

    @computed_field
    @property
    def slug(self) -> str:
        """Page slug; empty for the overview."""
        if self.href == MANUAL_ROOT:
            return ""
        return self.href[len(MANUAL_ROOT) + 1:]

    @model_validator(mode='after')
    def validate_subsections(self):
        for sub in self.subsections:
            if sub.path != self.href:
                raise ValueError(f"subsection {sub.href} does not belong to {self.href}")
        return self


class ManualCard(BaseModel):
    """Card on the manual overview page."""
    title: str
    description: str
    href: str
    icon: Optional[str] = None
    color: str = "blue"
    features: List[str] = Field(default_factory=list)


class ComingSoon(BaseModel):
    title: str
    desc: str


class ManualIndex(BaseModel):
    title: str
    intro: str
    sections: List[ManualSection]
    cards: List[ManualCard] = Field(default_factory=list)
    coming_soon: List[ComingSoon] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_sections(self):
        hrefs = [section.href for section in self.sections]
        if len(hrefs) != len(set(hrefs)):
            raise ValueError("duplicate manual section href")
        if MANUAL_ROOT not in hrefs:
            raise ValueError("manual index must include the overview section")
        return self

    @property
    def pages(self) -> List[ManualSection]:
        """Sections backed by a page file, in index order."""
        return [section for section in self.sections if section.slug]


class PageLink(BaseModel):
    title: str
    href: str


class ManualPage(BaseModel):
    """A rendered manual page."""
    slug: str
    title: str
    summary: str = ""
    html: str
    anchors: List[str] = Field(default_factory=list)
    prev: Optional[PageLink] = None
    next: Optional[PageLink] = None
