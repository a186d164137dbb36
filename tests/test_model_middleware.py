"""Lifecycle hooks running through documents and models (init, validate, save, remove)."""

import asyncio
from collections import Counter

import pytest

from docforge import Document, DocumentValidationError, Schema


class TestPostSave:
    @pytest.mark.asyncio
    async def test_post_save_hooks_run_in_order(self, db):
        schema = Schema({"title": str})
        called = 0

        @schema.post("save")
        def first(doc):
            nonlocal called
            assert doc.title == "Little Green Running Hood"
            assert called == 0
            called += 1

        @schema.post("save")
        def second(doc):
            nonlocal called
            assert doc.title == "Little Green Running Hood"
            assert called == 1
            called += 1

        @schema.post("save")
        def third(doc, next):
            nonlocal called
            assert called == 2
            called += 1
            next()

        TestMiddleware = db.model("TestPostSaveMiddleware", schema)
        test = TestMiddleware.new(title="Little Green Running Hood")

        result = await test.save()

        assert result is test
        assert test.title == "Little Green Running Hood"
        assert called == 3

    @pytest.mark.asyncio
    async def test_sync_error_in_post_save(self, db):
        schema = Schema({"title": str})

        @schema.post("save")
        def woops(doc):
            raise RuntimeError("woops!")

        TestMiddleware = db.model("PostSaveError", schema)
        test = TestMiddleware.new(title="Test")

        with pytest.raises(RuntimeError, match="woops!"):
            await test.save()

        # the write already happened
        assert await TestMiddleware.find_by_id(test.id) is not None


class TestPromiseHooks:
    @pytest.mark.asyncio
    async def test_pre_hook_awaitable(self, db):
        schema = Schema({"title": str})
        called_pre = 0

        @schema.pre("save")
        async def slow(doc):
            nonlocal called_pre
            await asyncio.sleep(0.05)
            called_pre += 1

        TestMiddleware = db.model("AwaitablePre", schema)
        await TestMiddleware.new(title="Test").save()
        assert called_pre == 1

    @pytest.mark.asyncio
    async def test_post_hook_awaitable_mutation(self, db):
        schema = Schema({"title": str})

        @schema.post("save")
        async def retitle(doc):
            await asyncio.sleep(0.05)
            doc.title = "From Post Save"

        TestMiddleware = db.model("AwaitablePost", schema)
        doc = await TestMiddleware.new(title="Test").save()
        assert doc.title == "From Post Save"


class TestValidateAndSave:
    @pytest.mark.asyncio
    async def test_validate_hooks_run_before_save_hooks(self, db):
        schema = Schema({"title": str})
        order = []

        @schema.pre("validate")
        def pre_validate(doc, next):
            order.append("pre validate")
            next()

        @schema.post("validate")
        def post_validate(doc):
            order.append("post validate")

        @schema.pre("save")
        def pre_save(doc, next):
            order.append("pre save")
            next()

        Book = db.model("Book", schema)
        await Book.create()
        assert order == ["pre validate", "post validate", "pre save"]

    @pytest.mark.asyncio
    async def test_validate_and_remove_counts(self, db):
        schema = Schema({"title": str})
        counts = Counter()

        @schema.pre("validate")
        def pre_validate(doc, next):
            counts["pre validate"] += 1
            next()

        @schema.pre("remove")
        def pre_remove(doc, next):
            counts["pre remove"] += 1
            next()

        @schema.post("validate")
        def post_validate(doc):
            assert isinstance(doc, Document)
            counts["post validate"] += 1

        @schema.post("remove")
        def post_remove(doc):
            assert isinstance(doc, Document)
            counts["post remove"] += 1

        Test = db.model("TestPostValidateMiddleware", schema)
        test = Test.new(title="banana")

        await test.save()
        assert counts == {"pre validate": 1, "post validate": 1}

        await test.remove()
        assert counts == {
            "pre validate": 1,
            "post validate": 1,
            "pre remove": 1,
            "post remove": 1,
        }
        assert await Test.find_by_id(test.id) is None

    @pytest.mark.asyncio
    async def test_validation_failure_skips_save_hooks(self, db):
        schema = Schema({"title": {"type": "string", "required": True}})
        saved = []
        schema.pre("save", lambda doc: saved.append(doc))

        Book = db.model("RequiredTitle", schema)
        with pytest.raises(DocumentValidationError) as exc_info:
            await Book.create()

        assert [e.code for e in exc_info.value.errors] == ["REQUIRED"]
        assert saved == []
        assert await Book.find() == []


class TestInitRemoveFlow:
    @pytest.mark.asyncio
    async def test_init_save_error_then_remove(self, db):
        schema = Schema({"title": str})
        called = 0

        @schema.pre("init")
        def on_init(doc):
            nonlocal called
            called += 1

        @schema.pre("save")
        def on_save(doc, next):
            nonlocal called
            called += 1
            next(ValueError("Error 101"))

        @schema.pre("remove")
        def on_remove(doc, next):
            nonlocal called
            called += 1
            next()

        TestMiddleware = db.model("TestMiddleware", schema)
        test = TestMiddleware.new()

        await test.init({"title": "Test"})
        assert called == 1
        assert test.title == "Test"

        with pytest.raises(ValueError, match="Error 101"):
            await test.save()
        assert called == 2

        await test.remove()
        assert called == 3

    @pytest.mark.asyncio
    async def test_post_init_runs_once_per_load(self, db):
        schema = Schema({"title": str})
        seen = {"pre": [], "post": []}

        @schema.pre("init")
        def pre_init(doc):
            seen["pre"].append(doc.title)

        @schema.post("init")
        def post_init(doc):
            assert isinstance(doc, Document)
            seen["post"].append(doc.title)

        Test = db.model("TestPostInitMiddleware", schema)
        test = await Test.create(title="banana")
        assert seen == {"pre": [], "post": []}

        loaded = await Test.find_by_id(test.id)
        assert loaded.title == "banana"
        assert not loaded.is_new
        # pre init sees the document before its fields are populated
        assert seen == {"pre": [None], "post": ["banana"]}

        await loaded.remove()

    @pytest.mark.asyncio
    async def test_find_hydrates_each_document(self, db):
        schema = Schema({"title": str, "genre": str})
        inits = []
        schema.post("init", lambda doc: inits.append(doc.title))

        Book = db.model("Novel", schema)
        await Book.create(title="Dune", genre="scifi")
        await Book.create(title="Emma", genre="classic")
        await Book.create(title="Solaris", genre="scifi")

        found = await Book.find({"genre": "scifi"})
        assert sorted(d.title for d in found) == ["Dune", "Solaris"]
        assert sorted(inits) == ["Dune", "Solaris"]


class TestSaveAfterNext:
    @pytest.mark.asyncio
    async def test_error_after_next_is_not_reported(self, db):
        schema = Schema({"title": str})
        called = 0

        @schema.pre("save")
        def continue_then_raise(doc, next):
            next()
            # This error will not get reported, because next() was already called
            raise RuntimeError("woops!")

        @schema.pre("save")
        def second(doc, next):
            nonlocal called
            called += 1
            next()

        TestMiddleware = db.model("ErrorAfterNext", schema)
        test = TestMiddleware.new(title="Test")

        await test.save()
        assert called == 1
        assert (await TestMiddleware.find_by_id(test.id)).title == "Test"


class TestEmbeddedHooks:
    @pytest.mark.asyncio
    async def test_child_hooks_run_for_every_child_on_every_save(self, db):
        child_schema = Schema({"name": str})
        child_calls_by_name = Counter()
        parent_pre_calls = 0

        @child_schema.pre("save")
        def child_pre_save(doc, next):
            child_calls_by_name[doc.name] += 1
            next()

        parent_schema = Schema({"name": str, "children": [child_schema]})

        @parent_schema.pre("save")
        def parent_pre_save(doc, next):
            nonlocal parent_pre_calls
            parent_pre_calls += 1
            next()

        Parent = db.model("Parent", parent_schema)
        parent = Parent.new(
            name="Han",
            children=[{"name": "Jaina"}, {"name": "Jacen"}],
        )

        await parent.save()
        assert sum(child_calls_by_name.values()) == 2
        assert child_calls_by_name["Jaina"] == 1
        assert child_calls_by_name["Jacen"] == 1
        assert parent_pre_calls == 1

        parent.children[0].name = "Anakin"
        await parent.save()
        assert sum(child_calls_by_name.values()) == 4
        assert child_calls_by_name["Anakin"] == 1
        assert child_calls_by_name["Jaina"] == 1
        assert child_calls_by_name["Jacen"] == 2
        assert parent_pre_calls == 2

        loaded = await Parent.find_by_id(parent.id)
        assert [c.name for c in loaded.children] == ["Anakin", "Jacen"]

    @pytest.mark.asyncio
    async def test_child_save_hook_mutation_is_persisted(self, db):
        child_schema = Schema({"name": str, "slug": str})

        @child_schema.pre("save")
        def slugify(doc):
            doc.slug = doc.name.lower()

        Parent = db.model("Shelf", Schema({"books": [child_schema]}))
        shelf = await Parent.create(books=[{"name": "Dune"}])

        loaded = await Parent.find_by_id(shelf.id)
        assert loaded.books[0].slug == "dune"

    @pytest.mark.asyncio
    async def test_child_save_failure_aborts_parent_write(self, db):
        child_schema = Schema({"name": str})

        @child_schema.pre("save")
        def refuse(doc):
            raise PermissionError(f"cannot save {doc.name}")

        parent_post = []
        parent_schema = Schema({"children": [child_schema]})
        parent_schema.post("save", lambda doc: parent_post.append(doc))

        Parent = db.model("Refusing", parent_schema)
        parent = Parent.new(children=[{"name": "Leia"}])

        with pytest.raises(PermissionError, match="cannot save Leia"):
            await parent.save()
        assert parent_post == []
        assert await Parent.find_by_id(parent.id) is None

    @pytest.mark.asyncio
    async def test_child_validation_errors_carry_paths(self, db):
        child_schema = Schema({"name": {"type": "string", "required": True}})
        Parent = db.model("Family", Schema({"children": [child_schema]}))
        parent = Parent.new(children=[{"name": "Ben"}, {}])

        with pytest.raises(DocumentValidationError) as exc_info:
            await parent.save()
        assert [e.field for e in exc_info.value.errors] == ["children.1.name"]

    @pytest.mark.asyncio
    async def test_child_validate_hooks_run(self, db):
        child_schema = Schema({"name": str})
        validated = []
        child_schema.pre("validate", lambda doc: validated.append(doc.name))

        Parent = db.model("Validated", Schema({"children": [child_schema]}))
        await Parent.create(children=[{"name": "a"}, {"name": "b"}])
        assert validated == ["a", "b"]

    @pytest.mark.asyncio
    async def test_child_init_hooks_run_on_load(self, db):
        child_schema = Schema({"name": str})
        loaded_names = []
        child_schema.post("init", lambda doc: loaded_names.append(doc.name))

        Parent = db.model("Loaded", Schema({"children": [child_schema], "lead": child_schema}))
        parent = await Parent.create(children=[{"name": "a"}], lead={"name": "boss"})
        assert loaded_names == []

        loaded = await Parent.find_by_id(parent.id)
        assert sorted(loaded_names) == ["a", "boss"]
        assert loaded.lead.parent is loaded

    @pytest.mark.asyncio
    async def test_embedded_remove_detaches_from_parent(self, db):
        child_schema = Schema({"name": str})
        removed = []
        child_schema.post("remove", lambda doc: removed.append(doc.name))

        Parent = db.model("Detaching", Schema({"children": [child_schema]}))
        parent = await Parent.create(children=[{"name": "a"}, {"name": "b"}])

        await parent.children[0].remove()
        assert removed == ["a"]
        assert [c.name for c in parent.children] == ["b"]

        await parent.save()
        loaded = await Parent.find_by_id(parent.id)
        assert [c.name for c in loaded.children] == ["b"]

    @pytest.mark.asyncio
    async def test_appended_children_are_documents(self, db):
        child_schema = Schema({"name": str})
        calls = []
        child_schema.pre("save", lambda doc: calls.append(doc.name))

        Parent = db.model("Growing", Schema({"children": [child_schema]}))
        parent = await Parent.create(children=[{"name": "a"}])
        parent.children.append({"name": "b"})
        await parent.save()

        assert calls == ["a", "a", "b"]
        assert parent.children[1].parent is parent

    @pytest.mark.asyncio
    async def test_in_place_added_children_are_documents(self, db):
        child_schema = Schema({"name": str})
        calls = []
        child_schema.pre("save", lambda doc: calls.append(doc.name))

        Parent = db.model("Extended", Schema({"children": [child_schema]}))
        parent = await Parent.create(children=[{"name": "a"}])
        kids = parent.children
        kids += [{"name": "b"}]
        parent.children += [{"name": "c"}]
        await parent.save()

        assert calls == ["a", "a", "b", "c"]
        assert all(child.parent is parent for child in parent.children)
        loaded = await Parent.find_by_id(parent.id)
        assert [c.name for c in loaded.children] == ["a", "b", "c"]


class TestSqliteBackedHooks:
    @pytest.mark.asyncio
    async def test_round_trip_runs_all_operations(self, sqlite_db):
        schema = Schema({"title": str, "pages": {"type": "integer", "min": 1}})
        log = []
        for operation in ("init", "validate", "save", "remove"):
            schema.pre(operation, lambda doc, op=operation: log.append(f"pre {op}"))
            schema.post(operation, lambda doc, op=operation: log.append(f"post {op}"))

        Book = sqlite_db.model("Book", schema)
        book = await Book.create(title="Dune", pages=412)
        loaded = await Book.find_by_id(book.id)
        await loaded.remove()

        assert log == [
            "pre validate",
            "post validate",
            "pre save",
            "post save",
            "pre init",
            "post init",
            "pre remove",
            "post remove",
        ]
        assert loaded.pages == 412
        assert await Book.find_by_id(book.id) is None
