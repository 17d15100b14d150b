"""
Builders for the RUN instructions that install system and R packages.
"""
from typing import List, Optional
from jinja2 import Template

from ..MODELS.environment import PackageSource, PackageSpec
from ..MODELS.instructions import Form, Run

APT_INSTALL_TEMPLATE = Template(
    "export DEBIAN_FRONTEND=noninteractive"
    " && apt-get update -qq"
    " && apt-get install -y --no-install-recommends {{ packages | join(' ') }}"
    " && rm -rf /var/lib/apt/lists/*"
)

INSTALL_VERSION_TEMPLATE = Template(
    'Rscript -e "'
    "{% for pkg in packages %}"
    "remotes::install_version('{{ pkg.name }}', version = '{{ pkg.version }}'"
    "{% if repos %}, repos = '{{ repos }}'{% endif %}, upgrade = 'never')"
    "{% if not loop.last %}; {% endif %}"
    "{% endfor %}"
    '"'
)

GITHUB_REF_TEMPLATE = Template("{{ pkg.repo or pkg.name }}{% if pkg.ref %}@{{ pkg.ref }}{% endif %}")


def system_install(packages: List[str]) -> Optional[Run]:
    """
    RUN instruction installing Debian packages, or None if there are none.

    Duplicates are dropped and the remaining names sorted so the output is stable.
    """
    names = sorted(set(packages))
    if not names:
        return None
    return Run(program=APT_INSTALL_TEMPLATE.render(packages=names), form=Form.SHELL)


def package_installs(packages: List[PackageSpec], repos: Optional[str] = None) -> List[Run]:
    """
    RUN instructions installing R packages, in this order: packages without a
    pinned version from CRAN, pinned CRAN versions, then GitHub packages.

    :param packages: The packages to install.
    :param repos: CRAN mirror URL; the image default is used when omitted.
    :return: Zero or more RUN instructions.
    """
    latest = [p for p in packages if p.source == PackageSource.CRAN and not p.version]
    pinned = [p for p in packages if p.source == PackageSource.CRAN and p.version]
    github = [p for p in packages if p.source == PackageSource.GITHUB]

    repo_params = ["--repos", repos] if repos else []
    runs = []

    if latest:
        runs.append(Run(
            program="install2.r",
            params=["--error", "--skipinstalled", *repo_params, *[p.name for p in latest]],
        ))

    if pinned or github:
        # remotes provides install_version; littler's installGithub.r needs it too
        runs.append(Run(program="install2.r", params=["--error", "--skipinstalled", *repo_params, "remotes"]))

    if pinned:
        runs.append(Run(
            program=INSTALL_VERSION_TEMPLATE.render(packages=pinned, repos=repos),
            form=Form.SHELL,
        ))

    if github:
        runs.append(Run(
            program="installGithub.r",
            params=[GITHUB_REF_TEMPLATE.render(pkg=p) for p in github],
        ))

    return runs
