"""
Unit tests for rendering Dockerfile models to text.
"""
import pytest
from r2d.CONVERTERS.to_dockerfile import DockerfileConverter, render, render_instruction
from r2d.MODELS.dockerfile import Dockerfile
from r2d.MODELS.instructions import (
    Arg, Cmd, Comment, Copy, Entrypoint, Env, Expose, Form, From, Instruction, Label,
    Maintainer, Run, StopSignal, User, Volume, Workdir,
)


@pytest.mark.parametrize("instruction,expected", [
    (From(image="rocker/r-ver", tag="3.3.3"), ["FROM rocker/r-ver:3.3.3"]),
    (From(image="rocker/r-ver", digest="sha256:abc"), ["FROM rocker/r-ver@sha256:abc"]),
    (Maintainer(name="Jane Doe"), ['LABEL maintainer="Jane Doe"']),
    (Label(data={"a": "1", "b": "two words"}), ['LABEL a="1" b="two words"']),
    (Label(data={"title": "x"}, prefix="org.opencontainers.image."),
     ['LABEL org.opencontainers.image.title="x"']),
    (Label(data={"a": "1", "b": "2"}, multi_line=True), ['LABEL a="1" \\\n  b="2"']),
    (Run(program="install2.r", params=["ggplot2"]), ['RUN ["install2.r", "ggplot2"]']),
    (Run(program="apt-get update", form=Form.SHELL), ["RUN apt-get update"]),
    (Cmd(program="R"), ['CMD ["R"]']),
    (Cmd(program="R", params=["--vanilla"], form=Form.SHELL), ["CMD R --vanilla"]),
    (Entrypoint(program="Rscript", params=["a.R"]), ['ENTRYPOINT ["Rscript", "a.R"]']),
    (Copy(src=["a.R", "b.R"], dest="/payload/"), ['COPY ["a.R", "b.R", "/payload/"]']),
    (Workdir(path="/payload/"), ["WORKDIR /payload/"]),
    (Env(variables={"TZ": "UTC", "LANG": "en_US.UTF-8"}), ['ENV TZ="UTC" LANG="en_US.UTF-8"']),
    (Expose(port=8787), ["EXPOSE 8787"]),
    (Expose(port=53, protocol="udp"), ["EXPOSE 53/udp"]),
    (Expose(port=8787, protocol="tcp", host_port=8080), ["# host port 8080", "EXPOSE 8787/tcp"]),
    (Comment(text="hello"), ["# hello"]),
    (Comment(text="one\ntwo"), ["# one", "# two"]),
    (Comment(text=""), ["#"]),
    (User(user="rstudio", group="staff"), ["USER rstudio:staff"]),
    (Volume(paths=["/data"]), ['VOLUME ["/data"]']),
    (Arg(name="R_VERSION"), ["ARG R_VERSION"]),
    (Arg(name="R_VERSION", default="4.0.0"), ['ARG R_VERSION="4.0.0"']),
    (StopSignal(signal="SIGINT"), ["STOPSIGNAL SIGINT"]),
])
def test_render_instruction(instruction, expected):
    assert render_instruction(instruction) == expected


def test_quotes_are_escaped():
    assert render_instruction(Label(data={"note": 'say "hi"'})) == ['LABEL note="say \\"hi\\""']


def test_unknown_instruction_type():
    with pytest.raises(TypeError):
        render_instruction(Instruction())


def test_render_document():
    dockerfile = Dockerfile(
        image=From(image="rocker/r-ver", tag="3.3.3"),
        maintainer=Maintainer(name="Jane"),
        cmd=Cmd(program="R"),
    )
    dockerfile.append(Workdir(path="/payload/"))
    dockerfile.add_footer(Comment(text="generated"))

    assert render(dockerfile) == (
        "FROM rocker/r-ver:3.3.3\n"
        'LABEL maintainer="Jane"\n'
        "WORKDIR /payload/\n"
        'CMD ["R"]\n'
        "# generated\n"
    )


def test_render_empty_document():
    assert render(Dockerfile()) == ""


def test_render_is_deterministic():
    def build():
        dockerfile = Dockerfile(image=From(image="rocker/r-ver", tag="4.0.0"), cmd=Cmd(program="R"))
        dockerfile.append(Label(data={"z": "1", "a": "2"}))
        dockerfile.append(Env(variables={"B": "1", "A": "2"}))
        return dockerfile

    first = build()
    assert render(first) == render(first)
    assert render(first) == render(build())


def test_first_and_last_lines():
    dockerfile = Dockerfile(image=From(image="rocker/r-ver", tag="3.3.3"))
    for i in range(10):
        dockerfile.append(Comment(text=f"step {i}"))
        dockerfile.append(Expose(port=8000 + i, host_port=9000 + i))
    dockerfile.append(Cmd(program="Rscript", params=["run.R"]))

    lines = render(dockerfile).splitlines()
    assert lines[0] == "FROM rocker/r-ver:3.3.3"
    assert lines[-1] == 'CMD ["Rscript", "run.R"]'


def test_converter_writes_file(tmp_path):
    dockerfile = Dockerfile(image=From(image="rocker/r-ver", tag="3.3.3"), cmd=Cmd(program="R"))
    target = tmp_path / "out" / "Dockerfile"

    path = DockerfileConverter(dockerfile).convert(str(target))

    assert path == str(target)
    assert target.read_text(encoding="utf-8") == render(dockerfile)


def test_render_unaffected_by_later_mutation():
    data = {"a": "1"}
    variables = {"TZ": "UTC"}
    label = Label(data=data)
    env = Env(variables=variables)
    dockerfile = Dockerfile(image=From(image="rocker/r-ver", tag="3.3.3"), cmd=Cmd(program="R"))
    dockerfile.extend([label, env])
    before = render(dockerfile)

    data["b"] = "2"
    variables["TZ"] = "CET"
    with pytest.raises(TypeError):
        label.data["b"] = "2"
    with pytest.raises(TypeError):
        env.variables["TZ"] = "CET"

    assert render(dockerfile) == before
    assert 'LABEL a="1"' in before
    assert 'ENV TZ="UTC"' in before


@pytest.mark.parametrize("instruction", [
    From(image="rocker/r-ver", tag="3.3.3"),
    Label(data={"a": "1", "b": "2"}, multi_line=True),
    Run(program="apt-get update", form=Form.SHELL),
    Expose(port=8787, host_port=8080),
    Comment(text="one\ntwo"),
])
def test_instruction_render_method(instruction):
    assert instruction.render() == render_instruction(instruction)
