"""
Unit tests for the Dockerfile document model.
"""
import random
import pytest
from r2d.MODELS.dockerfile import Dockerfile
from r2d.MODELS.errors import DuplicateTerminalInstruction, InvalidInstructionArgument
from r2d.MODELS.instructions import (
    Cmd, Comment, Copy, Entrypoint, Env, Expose, From, Label, Maintainer, Run, Workdir,
)

BASE = From(image="rocker/r-ver", tag="3.3.3")


def kinds(dockerfile):
    return [type(i).__name__ for i in dockerfile.instructions]


def test_seeded_order():
    dockerfile = Dockerfile(
        image=BASE,
        cmd=Cmd(program="R"),
        entrypoint=Entrypoint(program="Rscript"),
        maintainer=Maintainer(name="Jane"),
    )
    assert kinds(dockerfile) == ["From", "Maintainer", "Entrypoint", "Cmd"]


def test_append_goes_before_terminal_instructions():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    dockerfile.append(Workdir(path="/payload/")).append(Copy(src="a.R", dest="a.R"))
    assert kinds(dockerfile) == ["From", "Workdir", "Copy", "Cmd"]


def test_append_without_terminal_instructions():
    dockerfile = Dockerfile(image=BASE)
    dockerfile.append(Run(program="echo"))
    assert kinds(dockerfile) == ["From", "Run"]


def test_entrypoint_placed_before_cmd():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    dockerfile.append(Entrypoint(program="Rscript"))
    dockerfile.append(Env(variables={"TZ": "UTC"}))
    assert kinds(dockerfile) == ["From", "Env", "Entrypoint", "Cmd"]


def test_cmd_after_entrypoint():
    dockerfile = Dockerfile()
    dockerfile.append(Entrypoint(program="Rscript"))
    dockerfile.append(Cmd(program="analysis.R"))
    dockerfile.append(Run(program="echo"))
    assert kinds(dockerfile) == ["Run", "Entrypoint", "Cmd"]


def test_from_always_first():
    dockerfile = Dockerfile()
    dockerfile.append(Run(program="echo"))
    dockerfile.append(BASE)
    assert dockerfile.instructions[0] == BASE


def test_duplicates_replace_existing():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"), entrypoint=Entrypoint(program="sh"))
    dockerfile.append(Run(program="echo"))

    new_base = From(image="rocker/r-ver", tag="4.0.0")
    dockerfile.append(new_base)
    dockerfile.append(Cmd(program="Rscript"))
    dockerfile.append(Entrypoint(program="bash"))

    assert kinds(dockerfile) == ["From", "Run", "Entrypoint", "Cmd"]
    assert dockerfile.image == new_base
    assert dockerfile.cmd == Cmd(program="Rscript")
    assert dockerfile.entrypoint == Entrypoint(program="bash")


def test_non_terminal_appends_are_additive_and_ordered():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    comments = [Comment(text=str(i)) for i in range(5)]
    dockerfile.extend(comments)
    dockerfile.append(Comment(text="0"))
    assert list(dockerfile.body) == comments + [Comment(text="0")]


def test_invariants_hold_for_random_sequences():
    rng = random.Random(1234)
    pool = [
        BASE, From(image="r-base"), Cmd(program="R"), Entrypoint(program="Rscript"),
        Run(program="echo"), Workdir(path="/payload/"), Comment(text="x"),
        Expose(port=8787), Label(data={"a": "b"}), Maintainer(name="Jane"),
    ]
    for _ in range(50):
        dockerfile = Dockerfile()
        for instruction in rng.choices(pool, k=rng.randint(0, 20)):
            dockerfile.append(instruction)
        sequence = dockerfile.instructions
        froms = [i for i, x in enumerate(sequence) if isinstance(x, From)]
        assert froms in ([], [0])
        terminal = [x for x in sequence if x.is_terminal]
        assert len([x for x in terminal if isinstance(x, Cmd)]) <= 1
        assert len([x for x in terminal if isinstance(x, Entrypoint)]) <= 1
        assert list(sequence[len(sequence) - len(terminal):]) == terminal
        if len(terminal) == 2:
            assert isinstance(terminal[0], Entrypoint) and isinstance(terminal[1], Cmd)


def test_failed_append_leaves_document_unchanged():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    before = dockerfile.instructions
    with pytest.raises(TypeError):
        dockerfile.append("RUN echo")
    with pytest.raises(InvalidInstructionArgument):
        dockerfile.append(Expose(port=0))
    assert dockerfile.instructions == before


def test_insert_into_body():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    dockerfile.append(Run(program="a")).append(Run(program="b"))
    dockerfile.insert(0, Maintainer(name="Jane"))
    dockerfile.insert(2, Comment(text="between"))
    assert kinds(dockerfile) == ["From", "Maintainer", "Run", "Comment", "Run", "Cmd"]


def test_insert_rejects_fixed_position_instructions():
    dockerfile = Dockerfile(image=BASE)
    with pytest.raises(TypeError):
        dockerfile.insert(0, Cmd(program="R"))
    with pytest.raises(TypeError):
        dockerfile.insert(0, From(image="r-base"))
    with pytest.raises(IndexError):
        dockerfile.insert(5, Run(program="echo"))


def test_remove():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    dockerfile.append(Run(program="echo"))
    dockerfile.remove(Run(program="echo"))
    assert kinds(dockerfile) == ["From", "Cmd"]
    with pytest.raises(ValueError):
        dockerfile.remove(Run(program="echo"))


def test_footer_kept_outside_instructions():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"))
    dockerfile.add_footer(Comment(text="generated"))
    assert kinds(dockerfile) == ["From", "Cmd"]
    assert dockerfile.footer == (Comment(text="generated"),)
    with pytest.raises(TypeError):
        dockerfile.add_footer(Run(program="echo"))


def test_accessors_and_len():
    dockerfile = Dockerfile(image=BASE, maintainer=Maintainer(name="Jane"))
    assert dockerfile.image == BASE
    assert dockerfile.maintainer == Maintainer(name="Jane")
    assert dockerfile.cmd is None
    assert dockerfile.entrypoint is None
    assert len(dockerfile) == 2
    assert list(dockerfile) == list(dockerfile.instructions)
    assert "FROM" in repr(dockerfile)


def test_strict_mode_rejects_duplicates():
    dockerfile = Dockerfile(image=BASE, cmd=Cmd(program="R"), strict=True)
    before = dockerfile.instructions
    with pytest.raises(DuplicateTerminalInstruction):
        dockerfile.append(Cmd(program="Rscript"))
    with pytest.raises(DuplicateTerminalInstruction):
        dockerfile.append(From(image="r-base"))
    dockerfile.append(Entrypoint(program="Rscript"))
    assert dockerfile.instructions == (BASE, Entrypoint(program="Rscript"), Cmd(program="R"))
    assert before == (BASE, Cmd(program="R"))
