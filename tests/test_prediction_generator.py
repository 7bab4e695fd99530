import random
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from sibyl.ai.deepseek import DeepSeekRequestTool, FALLBACK_PREDICTIONS, parse_prediction_response
from sibyl.configuration.configuration import load_oracle_config
from sibyl.models.models import GenerationSource, Prediction

def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])

def make_client(text=None, error=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion(text), side_effect=error)
    return client

class TestParsePredictionResponse(unittest.TestCase):
    def test_parses_all_three_fields(self):
        text = "PREDICTION: SOL will break above $200\nCONFIDENCE: 68\nHOURS: 48"
        self.assertEqual(
            parse_prediction_response(text),
            Prediction(statement="SOL will break above $200", confidence=68, hours=48)
        )

    def test_labels_are_case_insensitive_and_surrounding_text_is_ignored(self):
        text = (
            "Here is my forecast.\n"
            "prediction:   BTC will retest $98k  \n"
            "Confidence: 55\n"
            "hours: 72\n"
            "Good luck!"
        )
        prediction = parse_prediction_response(text)
        self.assertEqual(prediction.statement, "BTC will retest $98k")
        self.assertEqual(prediction.confidence, 55)
        self.assertEqual(prediction.hours, 72)

    def test_out_of_range_values_are_passed_through(self):
        prediction = parse_prediction_response("PREDICTION: x\nCONFIDENCE: 101\nHOURS: 0")
        self.assertEqual((prediction.confidence, prediction.hours), (101, 0))

    def test_missing_field_discards_reply(self):
        for text in [
            "CONFIDENCE: 60\nHOURS: 24",
            "PREDICTION: ETH up\nHOURS: 24",
            "PREDICTION: ETH up\nCONFIDENCE: 60",
        ]:
            with self.subTest(text=text):
                self.assertIsNone(parse_prediction_response(text))

    def test_non_numeric_values_discard_reply(self):
        self.assertIsNone(parse_prediction_response("PREDICTION: ETH up\nCONFIDENCE: high\nHOURS: 24"))
        self.assertIsNone(parse_prediction_response("PREDICTION: ETH up\nCONFIDENCE: 60\nHOURS: two days"))

    def test_labels_must_start_a_line(self):
        text = "My PREDICTION: ETH up\nthe CONFIDENCE: 60\nand HOURS: 24"
        self.assertIsNone(parse_prediction_response(text))

    def test_empty_statement_discards_reply(self):
        self.assertIsNone(parse_prediction_response("PREDICTION:    \nCONFIDENCE: 60\nHOURS: 24"))

    def test_empty_reply(self):
        self.assertIsNone(parse_prediction_response(""))
        self.assertIsNone(parse_prediction_response(None))

class TestDeepSeekRequestTool(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.config = load_oracle_config(env={'DEEPSEEK_API_KEY': 'sk-test'})

    async def test_well_formed_reply_is_returned(self):
        client = make_client("PREDICTION: SOL flips $210\nCONFIDENCE: 72\nHOURS: 24")
        tool = DeepSeekRequestTool(self.config, client=client)

        result = await tool.generate()

        self.assertEqual(result.source, GenerationSource.MODEL)
        self.assertFalse(result.is_fallback)
        self.assertEqual(result.prediction, Prediction("SOL flips $210", 72, 24))

    async def test_request_uses_configured_model_and_sampling(self):
        client = make_client("PREDICTION: a\nCONFIDENCE: 60\nHOURS: 24")
        tool = DeepSeekRequestTool(self.config, client=client)

        await tool.generate()

        kwargs = client.chat.completions.create.await_args.kwargs
        self.assertEqual(kwargs['model'], 'deepseek-chat')
        self.assertEqual(kwargs['max_tokens'], 200)
        self.assertEqual(kwargs['temperature'], 0.7)
        self.assertEqual(kwargs['messages'][0]['role'], 'user')
        self.assertIn('PREDICTION:', kwargs['messages'][0]['content'])

    async def test_malformed_reply_uses_fallback(self):
        tool = DeepSeekRequestTool(self.config, client=make_client("I cannot predict markets."))

        result = await tool.generate()

        self.assertTrue(result.is_fallback)
        self.assertIn(result.prediction, FALLBACK_PREDICTIONS)
        self.assertEqual(result.reason, "unparseable response")

    async def test_request_failure_uses_fallback_without_retry(self):
        client = make_client(error=ConnectionError("connection reset"))
        tool = DeepSeekRequestTool(self.config, client=client)

        result = await tool.generate()

        self.assertTrue(result.is_fallback)
        self.assertIn(result.prediction, FALLBACK_PREDICTIONS)
        self.assertEqual(client.chat.completions.create.await_count, 1)

    async def test_missing_api_key_uses_fallback_without_request(self):
        tool = DeepSeekRequestTool(load_oracle_config(env={}))

        result = await tool.generate()

        self.assertIsNone(tool.client)
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.reason, "missing api key")
        self.assertIn(result.prediction, FALLBACK_PREDICTIONS)

    async def test_fallback_choice_follows_rng(self):
        tool = DeepSeekRequestTool(load_oracle_config(env={}), rng=random.Random(7))
        expected = random.Random(7).choice(FALLBACK_PREDICTIONS)

        result = await tool.generate()

        self.assertEqual(result.prediction, expected)

    def test_fallback_pool_holds_valid_predictions(self):
        self.assertGreaterEqual(len(FALLBACK_PREDICTIONS), 3)
        for prediction in FALLBACK_PREDICTIONS:
            self.assertTrue(prediction.statement)
            self.assertTrue(50 <= prediction.confidence <= 90)
            self.assertIn(prediction.hours, (24, 48, 72))

if __name__ == '__main__':
    unittest.main()
