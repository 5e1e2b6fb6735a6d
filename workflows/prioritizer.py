"""File prioritization before extraction.

Drops media and development artifacts and ranks what is left by how likely
it is to describe the business: keyword-named documents first, then other
documents and spreadsheets, then plain text and markdown.
"""

from typing import List, Optional

from storage import RemoteFile, PDF_MIME_TYPE

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Filename keywords (English and Spanish) that mark a business document
BUSINESS_KEYWORDS = [
    'brief', 'plan', 'propuesta', 'proposal', 'análisis', 'analisis', 'analysis',
    'roadmap', 'spec', 'estrategia', 'strategy', 'presupuesto', 'budget',
    'modelo', 'model', 'pitch', 'resumen', 'summary', 'requirements',
    'requisitos', 'scope', 'alcance', 'timeline', 'cronograma', 'milestones',
    'hitos', 'competencia', 'competitor', 'mercado', 'market', 'cliente',
    'customer', 'persona', 'user', 'business', 'negocio', 'revenue', 'ingresos',
    'costs', 'costos', 'pricing', 'precios',
]

# Name fragments of source code, configuration and build artifacts
IGNORED_PATTERNS = [
    # Source code and markup
    '.js', '.ts', '.tsx', '.jsx', '.py', '.rb', '.php', '.java', '.swift', '.kt',
    '.css', '.scss', '.sass', '.less', '.html', '.vue', '.svelte',
    # Configuration and dependency manifests
    'package.json', 'package-lock.json', 'yarn.lock', 'tsconfig', 'webpack',
    '.env', '.gitignore', '.eslint', '.prettier', 'babel', 'vite.config',
    'next.config', 'tailwind.config', 'postcss', 'dockerfile', 'docker-compose',
    # Development directories
    'node_modules', '.git', '.next', 'dist', 'build', '__pycache__', '.cache',
]

# Directories whose whole content is development output
IGNORED_DIRECTORIES = {
    'node_modules', '.git', '.next', 'dist', 'build', '__pycache__', '.cache',
}

LOW_PRIORITY_EXTENSIONS = ('.md', '.txt')
LOW_PRIORITY_MIME_TYPES = ('text/plain', 'text/markdown')


def is_excluded(file: RemoteFile) -> bool:
    """True for folders, media and development artifacts."""
    mime_type = file.mime_type or ""
    if (file.is_folder or 'folder' in mime_type
            or mime_type.startswith(('image/', 'video/', 'audio/'))):
        return True

    name = file.name.lower()
    if any(pattern in name for pattern in IGNORED_PATTERNS):
        return True

    parents = file.parent_path.lower().split('/') if file.parent_path else []
    return any(part in IGNORED_DIRECTORIES for part in parents)


def classify(file: RemoteFile) -> Optional[str]:
    """Return the priority tier of a file, or None if it should be dropped."""
    if is_excluded(file):
        return None

    name = file.name.lower()
    mime_type = file.mime_type or ""
    is_document = 'document' in mime_type or 'presentation' in mime_type
    is_pdf = mime_type == PDF_MIME_TYPE

    if is_document or is_pdf:
        if any(keyword in name for keyword in BUSINESS_KEYWORDS):
            return HIGH
        return MEDIUM
    if 'spreadsheet' in mime_type:
        return MEDIUM
    if name.endswith(LOW_PRIORITY_EXTENSIONS) or mime_type in LOW_PRIORITY_MIME_TYPES:
        return LOW
    return None


def prioritize(files: List[RemoteFile]) -> List[RemoteFile]:
    """Order candidate files high, then medium, then low.

    Excluded and unranked files are dropped. Order within a tier follows
    the input order.
    """
    tiers = {HIGH: [], MEDIUM: [], LOW: []}
    for file in files:
        tier = classify(file)
        if tier is not None:
            tiers[tier].append(file)
    return tiers[HIGH] + tiers[MEDIUM] + tiers[LOW]
