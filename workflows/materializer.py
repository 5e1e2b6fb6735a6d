"""Project materialization.

Turns an ingestion result into durable records: one project plus the notes
and links the model pulled out of the documents. This is the only step of
the pipeline that writes to the project store.
"""

from typing import Dict, List, Optional

from ideaforge import IdeaForge
from models import ExtractedDocument, ProjectStructure
from .project_store import ProjectStore, ProjectStoreError

# Progress of a project seeded with content for every framework step
SEEDED_PROGRESS = 20
FINAL_STEP = 5

IMPORT_TAGS = ["imported", "google-drive"]


def _join(*parts: str) -> str:
    return "\n\n".join(parts)


def framework_fields(structure: ProjectStructure) -> Dict[str, str]:
    """Render the five framework sections into the project's text columns."""
    concept = structure.concept
    market = structure.market
    model = structure.model
    action = structure.action
    plan = structure.resources_plan

    return {
        # Step 1: Concept
        'concept': _join(concept.get('idea', ''), concept.get('solution', '')),
        'problem_solved': _join(concept.get('problem', ''),
                                f"Value proposition: {concept.get('value', '')}"),
        # Step 2: Market
        'target_market': _join(market.get('target', ''),
                               f"Size: {market.get('size', '')}"),
        'market_validation': _join(f"Trends: {market.get('trends', '')}",
                                   f"Competitors: {market.get('competitors', '')}"),
        # Step 3: Business model
        'business_model': _join(f"Revenue: {model.get('revenue', '')}",
                                f"Costs: {model.get('costs', '')}"),
        'value_proposition': _join(f"Channels: {model.get('channels', '')}",
                                   f"Key resources: {model.get('resources', '')}"),
        # Step 4: Action plan
        'action_plan': action.get('tasks', ''),
        'milestones': _join(action.get('milestones', ''),
                            f"Timeline: {action.get('timeline', '')}"),
        # Step 5: Resources
        'resources': _join(f"Team: {plan.get('team', '')}",
                           f"Tools: {plan.get('tools', '')}",
                           f"Budget: {plan.get('budget', '')}"),
        'metrics': _join(action.get('metrics', ''),
                         f"Partners: {plan.get('partners', '')}"),
    }


def materialize(structure: ProjectStructure, owner_id: str, store: ProjectStore,
                source_folder: Optional[str] = None) -> Dict:
    """Persist a project structure as a project with its notes and links.

    Notes and links are written one at a time; one that fails is logged and
    skipped without touching the project or the others.

    Returns:
        The created project, with 'notes' and 'links' lists of created records

    Raises:
        ProjectStoreError: If the project itself can't be created
    """
    project = store.create_project(
        owner_id,
        structure.title or source_folder or "Imported project",
        description=structure.description,
        category=structure.category or "other",
        tags=structure.tags,
        status="idea",
        priority="medium",
        progress=SEEDED_PROGRESS,
        current_step=FINAL_STEP,
        source_folder=source_folder,
        **framework_fields(structure),
    )
    IdeaForge.log(f"Created project '{project['title']}' ({project['id']})")

    notes: List[Dict] = []
    for note in structure.extracted_notes:
        try:
            notes.append(store.create_note(
                owner_id, project['id'],
                title=note.get('title', ''),
                content=note.get('content', ''),
            ))
        except ProjectStoreError as e:
            IdeaForge.log(f"Warning: skipped note '{note.get('title', '')}': {e}")

    links: List[Dict] = []
    for link in structure.extracted_links:
        try:
            links.append(store.create_link(
                owner_id, project['id'],
                url=link.get('url', ''),
                title=link.get('title', ''),
                description=link.get('description', ''),
            ))
        except ProjectStoreError as e:
            IdeaForge.log(f"Warning: skipped link '{link.get('url', '')}': {e}")

    project['notes'] = notes
    project['links'] = links
    return project


def materialize_summary(folder_name: str, summary: str,
                        documents: List[ExtractedDocument],
                        owner_id: str, store: ProjectStore) -> Dict:
    """Persist a single-shot folder analysis.

    Creates a minimal project whose description is the model's summary, and
    an analysis note recording which files were read.
    """
    project = store.create_project(
        owner_id,
        folder_name or "Imported project",
        description=summary,
        tags=IMPORT_TAGS,
        status="idea",
        priority="medium",
        progress=0,
        current_step=1,
        source_folder=folder_name,
    )
    IdeaForge.log(f"Created project '{project['title']}' ({project['id']})")

    file_list = "\n".join(f"- {doc.path}" for doc in documents)
    notes: List[Dict] = []
    try:
        notes.append(store.create_note(
            owner_id, project['id'],
            title="AI analysis - Drive import",
            content=(f"## Project analysis\n\n{summary}\n\n---\n\n"
                     f"**Files analyzed:** {len(documents)}\n"
                     f"**Source folder:** {folder_name}\n\n{file_list}"),
            category="AI analysis",
            tags=IMPORT_TAGS + ["ai-analysis"],
        ))
    except ProjectStoreError as e:
        IdeaForge.log(f"Warning: skipped analysis note: {e}")

    project['notes'] = notes
    project['links'] = []
    return project
