"""Tests for the rephrase -> retrieve -> generate orchestrator."""

from unittest.mock import AsyncMock

import pytest

from conftest import ScriptedLLM, assistant, user
from localrag.models import Chunk, ConversationState, GenerationError, RAGConfig, RephraseError, SearchError
from localrag.pipeline.rag_pipeline import RAGPipeline
from localrag.pipeline.state_machine import PipelineOrchestrator, PipelineStage, route_from_start


def make_orchestrator(rephrase=None, retrieve=None, generate=None, **kwargs):
    rephrase = rephrase or AsyncMock(return_value={"rephrased_query": "rephrased"})
    retrieve = retrieve or AsyncMock(
        return_value={"retrieved_context": [Chunk(text="ctx", start_offset=0, length=3)]}
    )

    async def default_generate(state):
        return {"messages": [*state.messages, assistant("answer")]}

    generate = generate or AsyncMock(side_effect=default_generate)
    return PipelineOrchestrator(rephrase, retrieve, generate, **kwargs), rephrase, retrieve, generate


class TestPipelineOrchestrator:
    def test_runs_start_at_rephrasing(self):
        assert route_from_start(ConversationState(messages=[user("hi")])) is PipelineStage.REPHRASING

    @pytest.mark.asyncio
    async def test_happy_path(self):
        orchestrator, rephrase, retrieve, generate = make_orchestrator()
        stages = []

        final = await orchestrator.run([user("question")], on_transition=lambda s, _: stages.append(s))

        assert stages == [
            PipelineStage.REPHRASING,
            PipelineStage.RETRIEVING,
            PipelineStage.GENERATING,
            PipelineStage.DONE,
        ]
        assert final.rephrased_query == "rephrased"
        assert [c.text for c in final.retrieved_context] == ["ctx"]
        assert final.messages[-1] == assistant("answer")

    @pytest.mark.asyncio
    async def test_stages_see_previous_output(self):
        orchestrator, _, retrieve, generate = make_orchestrator()

        await orchestrator.run([user("question")])

        assert retrieve.await_args.args[0].rephrased_query == "rephrased"
        assert generate.await_args.args[0].retrieved_context[0].text == "ctx"

    @pytest.mark.asyncio
    async def test_rephrase_failure_retrieves_with_raw_message(self):
        orchestrator, _, retrieve, generate = make_orchestrator(
            rephrase=AsyncMock(side_effect=RephraseError("model unavailable"))
        )

        final = await orchestrator.run([user("what about payment?")])

        seen = retrieve.await_args.args[0]
        assert seen.rephrased_query is None
        assert seen.search_query == "what about payment?"
        assert final.messages[-1] == assistant("answer")

    @pytest.mark.asyncio
    async def test_retrieval_failure_generates_without_context(self):
        orchestrator, _, _, generate = make_orchestrator(
            retrieve=AsyncMock(side_effect=SearchError("index broken"))
        )

        final = await orchestrator.run([user("question")])

        assert generate.await_args.args[0].retrieved_context == []
        assert final.messages[-1] == assistant("answer")

    @pytest.mark.asyncio
    async def test_generation_failure_is_fatal(self):
        orchestrator, *_ = make_orchestrator(generate=AsyncMock(side_effect=RuntimeError("oom")))

        with pytest.raises(GenerationError, match="oom"):
            await orchestrator.run([user("question")])

    @pytest.mark.asyncio
    async def test_generation_error_passes_through(self):
        error = GenerationError("No response generated from the model")
        orchestrator, *_ = make_orchestrator(generate=AsyncMock(side_effect=error))

        with pytest.raises(GenerationError) as excinfo:
            await orchestrator.run([user("question")])

        assert excinfo.value is error

    @pytest.mark.asyncio
    async def test_caller_messages_are_not_mutated(self):
        orchestrator, *_ = make_orchestrator()
        messages = [user("question")]

        final = await orchestrator.run(messages)

        assert messages == [user("question")]
        assert len(final.messages) == 2

    @pytest.mark.asyncio
    async def test_custom_router_can_skip_stages(self):
        orchestrator, rephrase, retrieve, _ = make_orchestrator(router=lambda state: PipelineStage.GENERATING)

        final = await orchestrator.run([user("hello")])

        rephrase.assert_not_awaited()
        retrieve.assert_not_awaited()
        assert final.messages[-1] == assistant("answer")


class TestRAGPipeline:
    @pytest.mark.asyncio
    async def test_answer_is_grounded_in_ingested_text(self, pipeline, llm):
        await pipeline.ingest_text("The contract requires payment within thirty days.", name="terms")

        reply = await pipeline.answer([user("When is payment due under the contract?")])

        assert reply == assistant("final answer")
        prompt = llm.prompts_for("generation")[0]
        assert "payment within thirty days" in prompt[1]["content"]
        assert prompt[-1]["content"] == "rephrased question"

    @pytest.mark.asyncio
    async def test_empty_index_uses_general_prompt(self, pipeline, llm):
        reply = await pipeline.answer([user("hello")])

        assert reply.role == "assistant"
        prompt = llm.prompts_for("generation")[0]
        assert len(prompt) == 2
        for message in prompt:
            assert "<doc>" not in message["content"]
            assert "<context>" not in message["content"]

    @pytest.mark.asyncio
    async def test_rephrase_prompt_when_conversation_ends_with_assistant(self, pipeline, llm):
        await pipeline.answer([user("Q1"), assistant("A1")])

        prompt = llm.prompts_for("rephrase")[0]
        assert [m["content"] for m in prompt[1:]] == ["Q1"]

    @pytest.mark.asyncio
    async def test_rephrase_failure_still_answers(self, embedder, extractor):
        llm = ScriptedLLM({"rephrase": ConnectionError("down")})
        pipeline = RAGPipeline(RAGConfig(), embedder=embedder, llm=llm, extractor=extractor)
        await pipeline.ingest_text("The river runs past the tree.", name="nature")

        reply = await pipeline.answer([user("Tell me about the river")])

        assert reply == assistant("final answer")
        assert llm.prompts_for("generation")[0][-1]["content"] == "Tell me about the river"

    @pytest.mark.asyncio
    async def test_search_returns_scored_results(self, pipeline):
        await pipeline.ingest_pdf(b"%PDF-fake", name="handbook")

        results = await pipeline.search("contract payment", k=1)

        assert len(results) == 1
        assert results[0].chunk.document_id == "handbook-p1"

    @pytest.mark.asyncio
    async def test_close_closes_providers(self, pipeline, embedder, llm):
        async with pipeline:
            pass

        assert embedder.closed
        assert llm.closed
